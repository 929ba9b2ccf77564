from datetime import datetime, timedelta

import pytz

from techtrainer.models import WorkoutStatus
from techtrainer.workouts.stats import resolve_timeframe, time_of_day, workout_stats

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=pytz.UTC)


def _completed(make_workout, user, when, **kwargs):
    kwargs.setdefault('duration', 30)
    return make_workout(user, status=WorkoutStatus.COMPLETED, completed_at=when, created_at=when, **kwargs)


def test_window_excludes_older_workouts(user, make_workout):
    for days in (5, 40, 200):
        _completed(make_workout, user, NOW - timedelta(days=days))

    recent = workout_stats(user.id, '30days', now=NOW)['summary']
    everything = workout_stats(user.id, 'alltime', now=NOW)['summary']

    assert (recent['totalWorkouts'], recent['completedWorkouts']) == (1, 1)
    assert (everything['totalWorkouts'], everything['completedWorkouts']) == (3, 3)
    assert everything['completionRate'] == 100


def test_summary_durations_and_completion_rate(user, make_user, make_workout):
    _completed(make_workout, user, NOW - timedelta(days=1), duration=20)
    _completed(make_workout, user, NOW - timedelta(days=2), duration=40)
    make_workout(user, status=WorkoutStatus.SCHEDULED, created_at=NOW - timedelta(days=3))
    make_workout(user, status=WorkoutStatus.IN_PROGRESS, created_at=NOW - timedelta(days=3))
    _completed(make_workout, make_user(), NOW - timedelta(days=1), duration=90)

    summary = workout_stats(user.id, '7days', now=NOW)['summary']

    assert summary['totalWorkouts'] == 4
    assert summary['completedWorkouts'] == 2
    assert summary['completionRate'] == 50
    assert summary['totalDuration'] == 60
    assert summary['avgDuration'] == 30
    assert (summary['maxDuration'], summary['minDuration']) == (40, 20)


def test_completion_rate_is_capped(user, make_workout):
    # Aangemaakt voor het venster, voltooid erin
    make_workout(user, status=WorkoutStatus.COMPLETED, duration=30,
                 created_at=NOW - timedelta(days=60), completed_at=NOW - timedelta(days=1))
    _completed(make_workout, user, NOW - timedelta(days=2))

    summary = workout_stats(user.id, '30days', now=NOW)['summary']

    assert summary['totalWorkouts'] == 1
    assert summary['completedWorkouts'] == 2
    assert summary['completionRate'] == 100


def test_empty_history(user):
    stats = workout_stats(user.id, '90days', now=NOW)

    assert stats['summary'] == {
        'totalWorkouts': 0,
        'completedWorkouts': 0,
        'completionRate': 0,
        'totalDuration': 0,
        'avgDuration': 0,
        'maxDuration': 0,
        'minDuration': 0,
    }
    assert stats['distribution']['byType'] == []
    assert set(stats['distribution']['byDayOfWeek'].values()) == {0}
    assert stats['distribution']['byTimeOfDay'] == {'morning': 0, 'afternoon': 0, 'evening': 0}


def test_wednesday_bucket(user, make_workout):
    wednesday = datetime(2024, 1, 3, 14, 30, tzinfo=pytz.UTC)
    assert wednesday.strftime('%A') == 'Wednesday'
    _completed(make_workout, user, wednesday)

    distribution = workout_stats(user.id, 'alltime', now=NOW)['distribution']

    assert distribution['byDayOfWeek']['Wednesday'] == 1
    assert sum(distribution['byDayOfWeek'].values()) == 1
    assert distribution['byTimeOfDay'] == {'morning': 0, 'afternoon': 1, 'evening': 0}


def test_distribution_by_type_and_difficulty(user, make_workout):
    _completed(make_workout, user, NOW - timedelta(hours=3), type='strength', difficulty='beginner', duration=30)
    _completed(make_workout, user, NOW - timedelta(hours=4), type='strength', difficulty='advanced', duration=40)
    _completed(make_workout, user, NOW - timedelta(hours=5), type='cardio', difficulty='beginner', duration=20)

    distribution = workout_stats(user.id, '7days', now=NOW)['distribution']

    assert distribution['byType'] == [
        {'type': 'cardio', 'count': 1, 'totalDuration': 20},
        {'type': 'strength', 'count': 2, 'totalDuration': 70},
    ]
    assert distribution['byDifficulty'] == [
        {'difficulty': 'advanced', 'count': 1},
        {'difficulty': 'beginner', 'count': 2},
    ]
    # 09:00, 08:00 en 07:00 UTC
    assert distribution['byTimeOfDay']['morning'] == 3


def test_resolve_timeframe():
    assert resolve_timeframe('bogus', NOW)[0] == '30days'
    assert resolve_timeframe(None, NOW)[1] == NOW - timedelta(days=30)

    _, start, end = resolve_timeframe('6months', datetime(2026, 8, 31, tzinfo=pytz.UTC))
    assert start == datetime(2026, 2, 28, tzinfo=pytz.UTC)
    assert end == datetime(2026, 8, 31, tzinfo=pytz.UTC)

    assert resolve_timeframe('alltime', NOW)[1].year == 1970


def test_time_of_day_boundaries():
    assert [time_of_day(hour) for hour in (0, 11, 12, 17, 18, 23)] == [
        'morning', 'morning', 'afternoon', 'afternoon', 'evening', 'evening']


def test_stats_endpoint(client, user, make_workout):
    resp = client.get('/api/workouts/stats?timeframe=unknown')

    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['timeframe'] == '30days'
    assert set(data) == {'timeframe', 'dateRange', 'summary', 'distribution'}
