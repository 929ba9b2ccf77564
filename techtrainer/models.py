import json
from enum import Enum
import pytz
import sqlalchemy as sa
import sqlalchemy.orm as so
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.types import TypeDecorator, TEXT
from techtrainer import db


def utcnow():
    return datetime.now(pytz.UTC)


def as_utc(value):
    """
    Zorg dat een datetime tijdzone-bewust is en in UTC staat.

    Notities:
        - SQLite levert naive datetimes terug; die worden als UTC beschouwd.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=pytz.UTC)
    return value.astimezone(pytz.UTC)


def isoformat(value):
    value = as_utc(value)
    return value.isoformat() if value else None


def enum_value(value):
    return value.value if isinstance(value, Enum) else value


def _enum_values(enum_class):
    return [member.value for member in enum_class]


def enum_column(enum_class):
    # Sla de waarde op ('in_progress'), niet de naam ('IN_PROGRESS')
    return sa.Enum(enum_class, values_callable=_enum_values, native_enum=False,
                   length=20, validate_strings=True)


class JSONEncodedList(TypeDecorator):
    """
    SQLAlchemy TypeDecorator om Python-lijsten als JSON-strings op te slaan in TEXT-velden.
    Notities:
        - Converteert lijsten naar JSON bij opslaan (`process_bind_param`).
        - Parseert JSON naar lijsten bij ophalen (`process_result_value`).
        - Gebruikt voor Exercise.instructions.
    """
    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return '[]'  # Standaard lege lijst
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return []
        return json.loads(value)


class WorkoutStatus(str, Enum):
    """
    Enum voor de levenscyclus van een workout.

    Notities:
        - scheduled -> in_progress -> completed; scheduled/in_progress -> cancelled.
        - Completed workouts zijn onveranderlijk.
    """
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkoutType(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"
    BALANCE = "balance"
    MIXED = "mixed"
    GENERAL = "general"


class Difficulty(str, Enum):
    """
    Enum voor moeilijkheidsgraden van workouts, oefeningen en gebruikers.
    """
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ExerciseType(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"
    BALANCE = "balance"


class MuscleGroup(str, Enum):
    """
    Enum voor spiergroepen in de oefeningencatalogus.
    """
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    LEGS = "legs"
    GLUTES = "glutes"
    ABS = "abs"
    CARDIO = "cardio"
    FULL_BODY = "full body"


class Equipment(str, Enum):
    """
    Enum voor benodigde apparatuur bij oefeningen.
    Notities:
        - 'OTHER' vangt niet-gestandaardiseerde apparatuur op.
    """
    NONE = "none"
    DUMBBELLS = "dumbbells"
    BARBELL = "barbell"
    KETTLEBELL = "kettlebell"
    RESISTANCE_BANDS = "resistance bands"
    MACHINES = "machines"
    BODYWEIGHT = "bodyweight"
    CARDIO_EQUIPMENT = "cardio equipment"
    OTHER = "other"


class User(db.Model):
    """
    Model voor gebruikers van TechTrainer.

    Notities:
        - fitness_level dient als standaard-moeilijkheid voor nieuwe workouts.
        - Implementeert Flask-Login eigenschappen (is_active, is_authenticated, etc.).
    """
    id: so.Mapped[int] = so.mapped_column(primary_key=True)
    email: so.Mapped[str] = so.mapped_column(sa.String(120), index=True, unique=True, nullable=False)
    name: so.Mapped[Optional[str]] = so.mapped_column(sa.String(64), nullable=True)
    fitness_level: so.Mapped[Optional[Difficulty]] = so.mapped_column(enum_column(Difficulty), nullable=True)
    created_at: so.Mapped[datetime] = so.mapped_column(sa.DateTime(timezone=True), default=utcnow)
    workouts: so.WriteOnlyMapped['Workout'] = so.relationship(back_populates='user')

    @property
    def is_active(self):
        """Vlag of de gebruiker actief is (voor Flask-Login)."""
        return True

    @property
    def is_authenticated(self):
        """Vlag of de gebruiker is geauthenticeerd (voor Flask-Login)."""
        return True

    @property
    def is_anonymous(self):
        """Vlag of de gebruiker anoniem is (voor Flask-Login)."""
        return False

    def get_id(self):
        return str(self.id)

    def __repr__(self):
        return f'<User {self.email}>'


class Exercise(db.Model):
    """
    Model voor oefeningen in de catalogus.
    Notities:
        - id is een string-sleutel uit de bron-CSV (zie seed_exercises.py).
        - Workouts verwijzen hiernaar via WorkoutExercise.exercise_id.
    """
    id: so.Mapped[str] = so.mapped_column(sa.String(50), primary_key=True)
    name: so.Mapped[str] = so.mapped_column(sa.String(100), index=True, unique=True)
    description: so.Mapped[Optional[str]] = so.mapped_column(sa.Text)
    muscle_group: so.Mapped[MuscleGroup] = so.mapped_column(enum_column(MuscleGroup), index=True)
    type: so.Mapped[ExerciseType] = so.mapped_column(enum_column(ExerciseType), default=ExerciseType.STRENGTH)
    equipment: so.Mapped[Equipment] = so.mapped_column(enum_column(Equipment), default=Equipment.NONE)
    difficulty: so.Mapped[Difficulty] = so.mapped_column(enum_column(Difficulty), index=True,
                                                         default=Difficulty.BEGINNER)
    instructions: so.Mapped[list] = so.mapped_column(JSONEncodedList, default=list)
    image_url: so.Mapped[Optional[str]] = so.mapped_column(sa.String(255))
    is_public: so.Mapped[bool] = so.mapped_column(sa.Boolean, default=True)

    def __repr__(self):
        return f'<Exercise {self.name}>'

    def to_details(self):
        """
        Catalogusgegevens die aan een workout-oefening worden toegevoegd.

        Returns:
            dict: naam, beschrijving, afbeelding, spiergroep, niveau en type.
        """
        return {
            'name': self.name,
            'description': self.description,
            'imageUrl': self.image_url,
            'muscleGroup': enum_value(self.muscle_group),
            'difficulty': enum_value(self.difficulty),
            'type': enum_value(self.type),
        }


class Workout(db.Model):
    """
    Model voor workouts van gebruikers (aggregate root).

    Notities:
        - exercises is een geordende lijst; position wordt bijgehouden door ordering_list.
        - version is de optimistic-locking teller van de mapper (version_id_col).
        - duration, completed_at, calories_burned en rating worden pas bij voltooiing gevuld.
    """
    id: so.Mapped[int] = so.mapped_column(primary_key=True)
    user_id: so.Mapped[int] = so.mapped_column(sa.ForeignKey('user.id'), index=True, nullable=False)
    title: so.Mapped[str] = so.mapped_column(sa.String(100), nullable=False)
    description: so.Mapped[str] = so.mapped_column(sa.String(500), default='')
    notes: so.Mapped[str] = so.mapped_column(sa.Text, default='')
    type: so.Mapped[WorkoutType] = so.mapped_column(enum_column(WorkoutType), index=True,
                                                    default=WorkoutType.GENERAL)
    difficulty: so.Mapped[Difficulty] = so.mapped_column(enum_column(Difficulty), index=True,
                                                         default=Difficulty.BEGINNER)
    estimated_duration: so.Mapped[int] = so.mapped_column(default=30)
    duration: so.Mapped[Optional[int]] = so.mapped_column(nullable=True)
    status: so.Mapped[WorkoutStatus] = so.mapped_column(enum_column(WorkoutStatus), index=True,
                                                        default=WorkoutStatus.IN_PROGRESS)
    scheduled_for: so.Mapped[Optional[datetime]] = so.mapped_column(sa.DateTime(timezone=True), nullable=True)
    started_at: so.Mapped[Optional[datetime]] = so.mapped_column(sa.DateTime(timezone=True), nullable=True)
    completed_at: so.Mapped[Optional[datetime]] = so.mapped_column(sa.DateTime(timezone=True), index=True,
                                                                   nullable=True)
    calories_burned: so.Mapped[Optional[int]] = so.mapped_column(nullable=True)
    rating: so.Mapped[Optional[int]] = so.mapped_column(nullable=True)
    created_at: so.Mapped[datetime] = so.mapped_column(sa.DateTime(timezone=True), index=True, default=utcnow)
    updated_at: so.Mapped[datetime] = so.mapped_column(sa.DateTime(timezone=True), default=utcnow,
                                                       onupdate=utcnow)
    version: so.Mapped[int] = so.mapped_column(nullable=False)
    user: so.Mapped['User'] = so.relationship(back_populates='workouts')
    exercises: so.Mapped[list['WorkoutExercise']] = so.relationship(
        back_populates='workout',
        order_by='WorkoutExercise.position',
        collection_class=ordering_list('position'),
        cascade="all, delete-orphan",
        lazy='selectin'
    )

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<Workout {self.title} ({enum_value(self.status)})>'

    @property
    def is_completed(self):
        return self.status == WorkoutStatus.COMPLETED

    def to_dict(self, details=None):
        """
        Converteer Workout-object naar dictionary voor JSON-responsen.

        Notities:
            - details: optionele mapping exercise_id -> catalogusgegevens (zie queries.py).
        """
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description or '',
            'notes': self.notes or '',
            'type': enum_value(self.type),
            'difficulty': enum_value(self.difficulty),
            'estimatedDuration': self.estimated_duration,
            'duration': self.duration,
            'status': enum_value(self.status),
            'scheduledFor': isoformat(self.scheduled_for),
            'startedAt': isoformat(self.started_at),
            'completedAt': isoformat(self.completed_at),
            'caloriesBurned': self.calories_burned,
            'rating': self.rating,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
            'version': self.version,
            'exercises': [entry.to_dict(details) for entry in self.exercises],
        }


class WorkoutExercise(db.Model):
    """
    Model voor oefeningen binnen een workout.
    Notities:
        - Precies een identiteitsbron: exercise_id (catalogus) of name (eigen oefening).
        - De actual_*-velden en completed blijven None tot de workout voltooid is.
    """
    __tablename__ = 'workout_exercise'
    id: so.Mapped[int] = so.mapped_column(primary_key=True)
    workout_id: so.Mapped[int] = so.mapped_column(sa.ForeignKey('workout.id', ondelete='CASCADE'), index=True)
    position: so.Mapped[int] = so.mapped_column(default=0)
    exercise_id: so.Mapped[Optional[str]] = so.mapped_column(sa.ForeignKey('exercise.id'), index=True,
                                                             nullable=True)
    name: so.Mapped[Optional[str]] = so.mapped_column(sa.String(100), nullable=True)
    sets: so.Mapped[int] = so.mapped_column(default=1)
    reps: so.Mapped[int] = so.mapped_column(default=10)
    duration: so.Mapped[int] = so.mapped_column(default=0)
    rest_time: so.Mapped[int] = so.mapped_column(default=60)
    notes: so.Mapped[str] = so.mapped_column(sa.Text, default='')
    completed: so.Mapped[Optional[bool]] = so.mapped_column(nullable=True)
    actual_sets: so.Mapped[Optional[int]] = so.mapped_column(nullable=True)
    actual_reps: so.Mapped[Optional[int]] = so.mapped_column(nullable=True)
    actual_weight: so.Mapped[Optional[float]] = so.mapped_column(nullable=True)
    actual_duration: so.Mapped[Optional[int]] = so.mapped_column(nullable=True)
    feedback: so.Mapped[Optional[str]] = so.mapped_column(sa.Text, nullable=True)
    workout: so.Mapped['Workout'] = so.relationship(back_populates='exercises')

    def __repr__(self):
        return f'<WorkoutExercise {self.exercise_id or self.name} in {self.workout_id}>'

    def to_dict(self, details=None):
        data = {
            'exerciseId': self.exercise_id,
            'name': self.name,
            'sets': self.sets,
            'reps': self.reps,
            'duration': self.duration,
            'restTime': self.rest_time,
            'notes': self.notes or '',
            'completed': self.completed,
            'actualSets': self.actual_sets,
            'actualReps': self.actual_reps,
            'actualWeight': self.actual_weight,
            'actualDuration': self.actual_duration,
            'feedback': self.feedback,
        }
        if details and self.exercise_id in details:
            data['details'] = details[self.exercise_id]
        return data


class Progress(db.Model):
    """
    Model voor voortgangsregistraties, aangemaakt bij het voltooien van een workout.

    Notities:
        - workout_id is een losse verwijzing zonder foreign key: de registratie
          blijft bestaan als de workout later verwijderd wordt.
        - Append-only vanuit de workout-engine.
    """
    id: so.Mapped[int] = so.mapped_column(primary_key=True)
    user_id: so.Mapped[int] = so.mapped_column(sa.ForeignKey('user.id'), index=True, nullable=False)
    date: so.Mapped[datetime] = so.mapped_column(sa.DateTime(timezone=True), index=True, default=utcnow)
    workout_id: so.Mapped[Optional[int]] = so.mapped_column(index=True, nullable=True)
    workout_duration: so.Mapped[Optional[int]] = so.mapped_column()
    calories_burned: so.Mapped[Optional[int]] = so.mapped_column()
    workout_rating: so.Mapped[Optional[int]] = so.mapped_column()
    workout_type: so.Mapped[Optional[str]] = so.mapped_column(sa.String(20))
    workout_difficulty: so.Mapped[Optional[str]] = so.mapped_column(sa.String(20))
    notes: so.Mapped[Optional[str]] = so.mapped_column(sa.Text)
    created_at: so.Mapped[datetime] = so.mapped_column(sa.DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f'<Progress workout={self.workout_id} user={self.user_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'date': isoformat(self.date),
            'workoutId': self.workout_id,
            'workoutDuration': self.workout_duration,
            'caloriesBurned': self.calories_burned,
            'workoutRating': self.workout_rating,
            'workoutType': self.workout_type,
            'workoutDifficulty': self.workout_difficulty,
            'notes': self.notes or '',
        }
