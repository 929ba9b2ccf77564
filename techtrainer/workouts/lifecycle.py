"""
Levenscyclus van workouts: aanmaken, bijwerken, starten, voltooien, annuleren,
klonen en verwijderen.

Alle functies controleren eerst het eigendom (user_id) en valideren de invoer
voordat er iets geschreven wordt. Elke actie eindigt met precies een commit.
"""
import logging
import sqlalchemy as sa
from sqlalchemy.orm.exc import StaleDataError
from techtrainer import db
from techtrainer.errors.exceptions import (AlreadyCompletedError, ConflictError, InvalidStateError,
                                           NotFoundError, ValidationError)
from techtrainer.forms import (CloneWorkoutForm, CompleteWorkoutForm, ExerciseEntryForm, ExerciseResultForm,
                               TransitionForm, WorkoutForm, WorkoutUpdateForm)
from techtrainer.models import (Difficulty, Exercise, Progress, Workout, WorkoutExercise, WorkoutStatus,
                                WorkoutType, as_utc, enum_value, utcnow)
from techtrainer.workouts.utils import estimate_duration

logger = logging.getLogger(__name__)

CUSTOM_EXERCISE_NAME = 'Custom Exercise'


def get_user_workout(user_id, workout_id):
    """
    Haal een workout op die eigendom is van de gebruiker.

    Notities:
        - Een workout van een andere gebruiker geeft dezelfde fout als een
          onbekende workout.
    """
    workout = db.session.scalar(
        sa.select(Workout).where(Workout.id == workout_id, Workout.user_id == user_id)
    )
    if workout is None:
        raise NotFoundError('Workout not found')
    return workout


def _check_version(workout, expected_version):
    if expected_version is not None and expected_version != workout.version:
        raise ConflictError(
            f'Workout was modified by another request (expected version {expected_version}, '
            f'current version {workout.version})'
        )


def _commit():
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise ConflictError('Workout was modified by another request')


def _validate_exercise_list(raw_exercises, form_class, label):
    if not isinstance(raw_exercises, list):
        raise ValidationError(f'{label} must be an array')
    forms = []
    for index, raw in enumerate(raw_exercises):
        if not isinstance(raw, dict):
            raise ValidationError(f'{label}[{index}] must be an object')
        forms.append(form_class.from_json(raw).raise_for_errors(prefix=f'{label}[{index}].'))
    return forms


def normalize_exercises(raw_exercises, settings):
    """
    Valideer en normaliseer oefeningen voor opslag in een workout.

    Catalogus-id's worden in een enkele query gecontroleerd. Een oefening met
    een bestaand id wordt een catalogusverwijzing (zonder naam); een oefening
    zonder id of met een onbekend id wordt een eigen oefening op naam.

    Returns:
        list[dict]: genormaliseerde oefeningen met snake_case sleutels.
    """
    if raw_exercises is None:
        return []
    forms = _validate_exercise_list(raw_exercises, ExerciseEntryForm, 'exercises')

    requested_ids = {form.exercise_id.data for form in forms if form.exercise_id.data}
    existing_ids = set()
    if requested_ids:
        existing_ids = set(db.session.scalars(
            sa.select(Exercise.id).where(Exercise.id.in_(requested_ids))
        ))
        unknown = requested_ids - existing_ids
        if unknown:
            logger.debug(f"Onbekende exercise-id's worden eigen oefeningen: {sorted(unknown)}")

    normalized = []
    for form in forms:
        entry = {
            'sets': form.sets.data or settings.default_sets,
            'reps': form.reps.data or settings.default_reps,
            'duration': form.duration.data or 0,
            'rest_time': form.rest_time.data or settings.default_rest_time,
            'notes': form.notes.data or '',
        }
        if form.exercise_id.data and form.exercise_id.data in existing_ids:
            entry.update(exercise_id=form.exercise_id.data, name=None)
        else:
            entry.update(exercise_id=None, name=form.name.data or CUSTOM_EXERCISE_NAME)
        normalized.append(entry)
    return normalized


def _estimate(entries, settings):
    return estimate_duration(entries, default=settings.default_estimated_duration,
                             seconds_per_rep=settings.seconds_per_rep)


def create_workout(user, payload, settings):
    """
    Maak een nieuwe workout aan voor de gebruiker.

    Notities:
        - Status is 'scheduled' als scheduledFor is opgegeven, anders 'in_progress'.
        - estimatedDuration wordt berekend als die ontbreekt.
        - difficulty valt terug op het fitnessniveau van de gebruiker.
    """
    title = payload.get('title')
    if not isinstance(title, str) or not title.strip():
        raise ValidationError('Workout title is required')
    form = WorkoutForm.from_json(payload).raise_for_errors()
    entries = normalize_exercises(payload.get('exercises'), settings)

    scheduled_for = form.scheduled_for.data
    workout = Workout(
        user_id=user.id,
        title=title.strip(),
        description=form.description.data or '',
        notes=form.notes.data or '',
        type=form.type.data or WorkoutType.GENERAL.value,
        difficulty=form.difficulty.data or enum_value(user.fitness_level) or Difficulty.BEGINNER.value,
        estimated_duration=form.estimated_duration.data or _estimate(entries, settings),
        scheduled_for=scheduled_for,
        status=WorkoutStatus.SCHEDULED if scheduled_for else WorkoutStatus.IN_PROGRESS,
        exercises=[WorkoutExercise(**entry) for entry in entries],
    )
    db.session.add(workout)
    db.session.commit()
    logger.debug(f"Workout aangemaakt: id={workout.id}, user={user.id}, status={enum_value(workout.status)}, "
                 f"geschatte duur={workout.estimated_duration} min")
    return workout


def update_workout(user_id, workout_id, payload, settings):
    """
    Werk een workout gedeeltelijk bij.

    Notities:
        - Voltooide en geannuleerde workouts zijn onveranderlijk.
        - Nieuwe exercises worden opnieuw genormaliseerd; zonder expliciete
          estimatedDuration wordt de schatting herberekend.
        - Een gewijzigde scheduledFor zonder expliciete status zet de status op 'scheduled'.
    """
    workout = get_user_workout(user_id, workout_id)
    if workout.is_completed:
        raise InvalidStateError('Cannot update a completed workout')
    if workout.status == WorkoutStatus.CANCELLED:
        raise InvalidStateError('Cannot update a cancelled workout')

    form = WorkoutUpdateForm.from_json(payload).raise_for_errors()
    _check_version(workout, form.version.data)

    title = payload.get('title')
    if 'title' in payload and (not isinstance(title, str) or not title.strip()):
        raise ValidationError('Workout title is required')
    entries = None
    if payload.get('exercises') is not None:
        entries = normalize_exercises(payload['exercises'], settings)

    # Vanaf hier is alle invoer gevalideerd
    if 'title' in payload:
        workout.title = title.strip()
    for key, attribute in (('description', 'description'), ('notes', 'notes')):
        if key in payload:
            setattr(workout, attribute, getattr(form, attribute).data or '')
    if form.type.data:
        workout.type = form.type.data
    if form.difficulty.data:
        workout.difficulty = form.difficulty.data

    if entries is not None:
        workout.exercises = [WorkoutExercise(**entry) for entry in entries]
        if not form.estimated_duration.data:
            workout.estimated_duration = _estimate(entries, settings)
    if form.estimated_duration.data:
        workout.estimated_duration = form.estimated_duration.data

    if 'scheduledFor' in payload:
        new_schedule = form.scheduled_for.data
        if new_schedule is not None and new_schedule != as_utc(workout.scheduled_for) and not form.status.data:
            workout.status = WorkoutStatus.SCHEDULED
        workout.scheduled_for = new_schedule

    if form.status.data:
        workout.status = form.status.data
        if form.status.data == WorkoutStatus.IN_PROGRESS.value and workout.started_at is None:
            workout.started_at = utcnow()

    workout.updated_at = utcnow()
    _commit()
    logger.debug(f"Workout bijgewerkt: id={workout.id}, versie={workout.version}")
    return workout


def start_workout(user_id, workout_id, payload=None):
    """
    Start een workout: status wordt 'in_progress' en started_at wordt vastgelegd.
    """
    workout = get_user_workout(user_id, workout_id)
    if workout.status in (WorkoutStatus.COMPLETED, WorkoutStatus.CANCELLED):
        raise InvalidStateError(f'Cannot start a {enum_value(workout.status)} workout')

    form = TransitionForm.from_json(payload).raise_for_errors()
    _check_version(workout, form.version.data)

    if workout.status == WorkoutStatus.IN_PROGRESS and workout.started_at is not None:
        logger.debug(f"Workout {workout.id} is al gestart om {workout.started_at}")
        return workout

    workout.status = WorkoutStatus.IN_PROGRESS
    workout.started_at = utcnow()
    workout.updated_at = workout.started_at
    _commit()
    logger.debug(f"Workout gestart: id={workout.id}")
    return workout


def apply_exercise_results(entries, results):
    """
    Koppel resultaten aan de oefeningen van een workout en markeer ze als voltooid.

    Eerst claimen resultaten met een index hun positie. Daarna claimt elk
    resultaat met alleen een exercise_id de eerste nog vrije oefening met dat id.
    Resultaten met alleen een naam worden genegeerd (namen zijn niet uniek).

    Returns:
        set[int]: posities van de oefeningen die een resultaat kregen.
    """
    matched = {}
    for result in results:
        index = result['index']
        if index is not None and index < len(entries) and index not in matched:
            matched[index] = result

    for result in results:
        if result['index'] is not None:
            continue
        if not result['exercise_id']:
            logger.debug(f"Resultaat zonder index of exercise_id genegeerd: {result.get('name')!r}")
            continue
        for position, entry in enumerate(entries):
            if position not in matched and entry.exercise_id == result['exercise_id']:
                matched[position] = result
                break

    for position, result in matched.items():
        entry = entries[position]
        entry.completed = True
        entry.actual_sets = result['sets'] or entry.sets
        entry.actual_reps = result['reps'] or entry.reps
        entry.actual_weight = result['weight'] or 0
        entry.actual_duration = result['duration'] or entry.duration
        entry.feedback = result['feedback'] or ''
    return set(matched)


def complete_workout(user_id, workout_id, payload):
    """
    Voltooi een workout en maak een Progress-registratie aan.

    Notities:
        - Workout-update en Progress-insert gaan in een transactie.
        - duration valt terug op estimatedDuration; calories en rating op 0.
        - notes wordt alleen overschreven als de sleutel in de payload staat.
    """
    workout = get_user_workout(user_id, workout_id)
    if workout.is_completed:
        raise AlreadyCompletedError('Workout is already marked as completed')
    if workout.status == WorkoutStatus.CANCELLED:
        raise InvalidStateError('Cannot complete a cancelled workout')

    form = CompleteWorkoutForm.from_json(payload).raise_for_errors()
    _check_version(workout, form.version.data)

    raw_results = payload.get('exerciseResults')
    results = []
    if raw_results is not None:
        results = [form_.data for form_ in _validate_exercise_list(raw_results, ExerciseResultForm,
                                                                   'exerciseResults')]

    matched = apply_exercise_results(workout.exercises, results)
    now = utcnow()
    workout.status = WorkoutStatus.COMPLETED
    workout.completed_at = now
    workout.updated_at = now
    workout.duration = form.duration.data or workout.estimated_duration
    workout.calories_burned = form.calories_burned.data or 0
    workout.rating = form.rating.data or 0
    if 'notes' in payload:
        workout.notes = form.notes.data or ''

    progress = Progress(
        user_id=user_id,
        date=now,
        workout_id=workout.id,
        workout_duration=workout.duration,
        calories_burned=workout.calories_burned,
        workout_rating=workout.rating,
        workout_type=enum_value(workout.type),
        workout_difficulty=enum_value(workout.difficulty),
        notes=f'Completed workout: {workout.title}',
    )
    db.session.add(progress)
    _commit()
    logger.debug(f"Workout voltooid: id={workout.id}, duur={workout.duration} min, "
                 f"oefeningen met resultaat={sorted(matched)}, progress={progress.id}")
    return workout, progress


def cancel_workout(user_id, workout_id, payload=None):
    workout = get_user_workout(user_id, workout_id)
    if workout.status in (WorkoutStatus.COMPLETED, WorkoutStatus.CANCELLED):
        raise InvalidStateError(f'Cannot cancel a {enum_value(workout.status)} workout')

    form = TransitionForm.from_json(payload).raise_for_errors()
    _check_version(workout, form.version.data)

    workout.status = WorkoutStatus.CANCELLED
    workout.updated_at = utcnow()
    _commit()
    logger.debug(f"Workout geannuleerd: id={workout.id}")
    return workout


def clone_workout(user_id, workout_id, payload):
    """
    Kopieer een workout (alleen geplande waarden) naar een nieuwe workout.

    Notities:
        - Resultaten, voltooiing en beoordeling worden niet meegekopieerd.
        - Status volgt dezelfde regel als bij aanmaken (scheduledFor -> 'scheduled').
    """
    source = get_user_workout(user_id, workout_id)
    form = CloneWorkoutForm.from_json(payload).raise_for_errors()

    title = (form.title.data or '').strip() or f'{source.title} (copy)'[:100]
    scheduled_for = form.scheduled_for.data
    clone = Workout(
        user_id=user_id,
        title=title,
        description=source.description,
        type=source.type,
        difficulty=source.difficulty,
        estimated_duration=source.estimated_duration,
        scheduled_for=scheduled_for,
        status=WorkoutStatus.SCHEDULED if scheduled_for else WorkoutStatus.IN_PROGRESS,
        exercises=[
            WorkoutExercise(
                exercise_id=entry.exercise_id,
                name=entry.name,
                sets=entry.sets,
                reps=entry.reps,
                duration=entry.duration,
                rest_time=entry.rest_time,
                notes=entry.notes,
            )
            for entry in source.exercises
        ],
    )
    db.session.add(clone)
    db.session.commit()
    logger.debug(f"Workout gekloond: bron={source.id}, kopie={clone.id}")
    return clone


def delete_workout(user_id, workout_id):
    workout = get_user_workout(user_id, workout_id)
    db.session.delete(workout)
    db.session.commit()
    logger.debug(f"Workout verwijderd: id={workout_id}")
    return workout_id
