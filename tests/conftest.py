import pytest
from flask_login import FlaskLoginClient

from config import TestConfig
from techtrainer import create_app, db
from techtrainer.models import Difficulty, Equipment, Exercise, ExerciseType, MuscleGroup, User, Workout, \
    WorkoutExercise, WorkoutStatus


@pytest.fixture
def app():
    app = create_app(TestConfig)
    app.test_client_class = FlaskLoginClient
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def settings(app):
    return app.extensions['techtrainer']


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(fitness_level=None, **kwargs):
        counter['n'] += 1
        user = User(email=kwargs.pop('email', f"user{counter['n']}@example.com"),
                    name=kwargs.pop('name', f"User {counter['n']}"),
                    fitness_level=fitness_level, **kwargs)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def client(app, user):
    # FlaskLoginClient logt de gebruiker in voor elk request
    return app.test_client(user=user)


@pytest.fixture
def anonymous_client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    exercises = [
        Exercise(id='pushup', name='Push-up', description='Klassieke push-up',
                 muscle_group=MuscleGroup.CHEST, type=ExerciseType.STRENGTH,
                 equipment=Equipment.BODYWEIGHT, difficulty=Difficulty.BEGINNER,
                 instructions=['Start in plank', 'Lower your chest'], image_url='https://example.com/pushup.png'),
        Exercise(id='squat', name='Squat', description='Bodyweight squat',
                 muscle_group=MuscleGroup.LEGS, type=ExerciseType.STRENGTH,
                 equipment=Equipment.NONE, difficulty=Difficulty.BEGINNER),
    ]
    db.session.add_all(exercises)
    db.session.commit()
    return {exercise.id: exercise for exercise in exercises}


@pytest.fixture
def make_workout(app):
    def _make_workout(user, exercises=None, **kwargs):
        kwargs.setdefault('title', 'Test workout')
        kwargs.setdefault('status', WorkoutStatus.IN_PROGRESS)
        workout = Workout(user_id=user.id, exercises=[WorkoutExercise(**entry) for entry in exercises or []],
                          **kwargs)
        db.session.add(workout)
        db.session.commit()
        return workout

    return _make_workout
