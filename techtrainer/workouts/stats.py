import logging
from datetime import datetime
import pytz
import sqlalchemy as sa
from dateutil.relativedelta import relativedelta
from techtrainer import db
from techtrainer.models import Workout, WorkoutStatus, enum_value, utcnow

logger = logging.getLogger(__name__)

DEFAULT_TIMEFRAME = '30days'
TIMEFRAMES = {
    '7days': relativedelta(days=7),
    '30days': relativedelta(days=30),
    '90days': relativedelta(days=90),
    '6months': relativedelta(months=6),
    '1year': relativedelta(years=1),
    'alltime': None,
}
EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)
# Zelfde volgorde als strftime('%w') / extract(dow): 0 = zondag
DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
TIME_OF_DAY = ['morning', 'afternoon', 'evening']


def resolve_timeframe(timeframe, now=None):
    """
    Zet een timeframe-naam om naar een (naam, start, eind) venster.

    Notities:
        - Onbekende of lege waarden vallen terug op '30days'.
        - Maanden en jaren gebruiken kalenderrekenkunde (relativedelta).
    """
    now = now or utcnow()
    if timeframe not in TIMEFRAMES:
        if timeframe:
            logger.debug(f"Onbekend timeframe {timeframe!r}, gebruik {DEFAULT_TIMEFRAME}")
        timeframe = DEFAULT_TIMEFRAME
    delta = TIMEFRAMES[timeframe]
    start = EPOCH if delta is None else now - delta
    return timeframe, start, now


def time_of_day(hour):
    if hour < 12:
        return 'morning'
    if hour < 18:
        return 'afternoon'
    return 'evening'


def _completed_in_window(user_id, start, end):
    return (
        Workout.user_id == user_id,
        Workout.status == WorkoutStatus.COMPLETED,
        Workout.completed_at >= start,
        Workout.completed_at <= end,
    )


def workout_stats(user_id, timeframe=DEFAULT_TIMEFRAME, now=None):
    """
    Bereken samenvattende statistieken en verdelingen voor een gebruiker.

    totalWorkouts telt workouts die in het venster zijn aangemaakt (elke status);
    alle andere cijfers gaan over workouts die in het venster zijn voltooid.
    Dag en tijdstip worden bepaald op completed_at in UTC.

    Returns:
        dict: timeframe, dateRange, summary en distribution.
    """
    timeframe, start, end = resolve_timeframe(timeframe, now)
    completed_filter = _completed_in_window(user_id, start, end)

    total_workouts = db.session.scalar(
        sa.select(sa.func.count(Workout.id)).where(
            Workout.user_id == user_id,
            Workout.created_at >= start,
            Workout.created_at <= end,
        )
    ) or 0
    completed_workouts = db.session.scalar(
        sa.select(sa.func.count(Workout.id)).where(*completed_filter)
    ) or 0

    duration_row = db.session.execute(
        sa.select(
            sa.func.sum(Workout.duration),
            sa.func.avg(Workout.duration),
            sa.func.max(Workout.duration),
            sa.func.min(Workout.duration),
        ).where(*completed_filter)
    ).one()
    total_duration, avg_duration, max_duration, min_duration = duration_row

    by_type = db.session.execute(
        sa.select(
            Workout.type,
            sa.func.count(Workout.id),
            sa.func.coalesce(sa.func.sum(Workout.duration), 0),
        ).where(*completed_filter).group_by(Workout.type).order_by(Workout.type)
    ).all()

    by_difficulty = db.session.execute(
        sa.select(Workout.difficulty, sa.func.count(Workout.id))
        .where(*completed_filter).group_by(Workout.difficulty).order_by(Workout.difficulty)
    ).all()

    day_of_week = sa.extract('dow', Workout.completed_at)
    by_day = db.session.execute(
        sa.select(day_of_week, sa.func.count(Workout.id))
        .where(*completed_filter).group_by(day_of_week)
    ).all()

    hour = sa.extract('hour', Workout.completed_at)
    by_hour = db.session.execute(
        sa.select(hour, sa.func.count(Workout.id))
        .where(*completed_filter).group_by(hour)
    ).all()

    day_distribution = dict.fromkeys(DAY_NAMES, 0)
    for day, count in by_day:
        day_distribution[DAY_NAMES[int(day)]] += count

    time_distribution = dict.fromkeys(TIME_OF_DAY, 0)
    for hour_value, count in by_hour:
        time_distribution[time_of_day(int(hour_value))] += count

    completion_rate = 0
    if total_workouts > 0:
        # Workouts die voor het venster zijn aangemaakt kunnen erin voltooid zijn
        completion_rate = min(completed_workouts / total_workouts * 100, 100.0)

    logger.debug(f"Statistieken voor user={user_id}, timeframe={timeframe}: "
                 f"{completed_workouts}/{total_workouts} voltooid")

    return {
        'timeframe': timeframe,
        'dateRange': {
            'start': start.isoformat(),
            'end': end.isoformat(),
        },
        'summary': {
            'totalWorkouts': total_workouts,
            'completedWorkouts': completed_workouts,
            'completionRate': completion_rate,
            'totalDuration': total_duration or 0,
            'avgDuration': float(avg_duration) if avg_duration is not None else 0,
            'maxDuration': max_duration or 0,
            'minDuration': min_duration or 0,
        },
        'distribution': {
            'byType': [
                {'type': enum_value(workout_type), 'count': count, 'totalDuration': type_duration}
                for workout_type, count, type_duration in by_type
            ],
            'byDifficulty': [
                {'difficulty': enum_value(difficulty), 'count': count}
                for difficulty, count in by_difficulty
            ],
            'byDayOfWeek': day_distribution,
            'byTimeOfDay': time_distribution,
        },
    }
