import logging
import sqlalchemy as sa
from techtrainer import db
from techtrainer.forms import WorkoutListForm, to_snake
from techtrainer.models import Exercise, Workout, enum_value
from techtrainer.workouts.lifecycle import get_user_workout

logger = logging.getLogger(__name__)

DEFAULT_SORT = 'createdAt'


def _sort_column(sort_by):
    # 'scheduledFor' -> Workout.scheduled_for; veldnamen zijn al gevalideerd in WorkoutListForm
    return getattr(Workout, to_snake(sort_by or DEFAULT_SORT))


def status_counts(user_id):
    """
    Tel de workouts van een gebruiker per status, los van andere filters.
    """
    rows = db.session.execute(
        sa.select(Workout.status, sa.func.count(Workout.id))
        .where(Workout.user_id == user_id)
        .group_by(Workout.status)
    ).all()
    return {enum_value(status): count for status, count in rows}


def list_workouts(user_id, args, settings):
    """
    Geef een gefilterde, gesorteerde en gepagineerde lijst workouts terug.

    Notities:
        - Filters: status, type, difficulty, search (titel, beschrijving, notities)
          en een bereik op createdAt (startDate/endDate).
        - limit wordt begrensd op settings.max_page_size.
        - Bij gelijke sorteerwaarde bepaalt het id de volgorde.

    Returns:
        dict: workouts, pagination en filters (aantallen per status).
    """
    form = WorkoutListForm.from_json(args).raise_for_errors()

    query = sa.select(Workout).where(Workout.user_id == user_id)
    if form.status.data:
        query = query.where(Workout.status == form.status.data)
    if form.type.data:
        query = query.where(Workout.type == form.type.data)
    if form.difficulty.data:
        query = query.where(Workout.difficulty == form.difficulty.data)
    if form.search.data:
        term = form.search.data.strip()
        query = query.where(sa.or_(
            Workout.title.icontains(term, autoescape=True),
            Workout.description.icontains(term, autoescape=True),
            Workout.notes.icontains(term, autoescape=True),
        ))
    if form.start_date.data:
        query = query.where(Workout.created_at >= form.start_date.data)
    if form.end_date.data:
        query = query.where(Workout.created_at <= form.end_date.data)

    column = _sort_column(form.sort_by.data)
    if form.sort_order.data == 'asc':
        query = query.order_by(column.asc(), Workout.id.asc())
    else:
        query = query.order_by(column.desc(), Workout.id.desc())

    page = db.paginate(
        query,
        page=form.page.data or 1,
        per_page=form.limit.data or settings.page_size,
        max_per_page=settings.max_page_size,
        error_out=False,
    )
    logger.debug(f"Workouts voor user={user_id}: pagina {page.page}/{page.pages}, totaal {page.total}")

    return {
        'workouts': [workout.to_dict() for workout in page.items],
        'pagination': {
            'total': page.total,
            'page': page.page,
            'pages': page.pages,
            'limit': page.per_page,
        },
        'filters': {
            'statusCounts': status_counts(user_id),
        },
    }


def exercise_details(workout):
    """
    Haal catalogusgegevens op voor alle catalogus-oefeningen van een workout.

    Notities:
        - Een enkele query voor alle id's.
        - Id's die niet (meer) in de catalogus staan krijgen geen details.

    Returns:
        dict: exercise_id -> Exercise.to_details()
    """
    ids = {entry.exercise_id for entry in workout.exercises if entry.exercise_id}
    if not ids:
        return {}
    exercises = db.session.scalars(sa.select(Exercise).where(Exercise.id.in_(ids)))
    return {exercise.id: exercise.to_details() for exercise in exercises}


def get_workout_details(user_id, workout_id):
    workout = get_user_workout(user_id, workout_id)
    return workout, exercise_details(workout)
