import math
from functools import wraps
from flask import jsonify, request
from techtrainer.errors.exceptions import ValidationError


def _planned(entry, key, default):
    # Werkt voor zowel dicts (genormaliseerde invoer) als WorkoutExercise-objecten
    value = entry.get(key) if isinstance(entry, dict) else getattr(entry, key, None)
    return value or default


def estimate_duration(exercises, default=30, seconds_per_rep=5):
    """
    Schat de duur van een workout in minuten.

    Per oefening: een set duurt reps * seconds_per_rep + duration seconden, en
    tussen de sets zit rest_time seconden rust. Het totaal wordt naar boven
    afgerond op hele minuten.

    Notities:
        - Lege lijst (of een totaal van 0) geeft de standaardduur terug, nooit 0.
        - Ontbrekende waarden vallen terug op sets=1, reps=10, rest_time=60, duration=0.

    Returns:
        int: geschatte duur in minuten.
    """
    if not exercises:
        return default

    total_seconds = 0
    for exercise in exercises:
        sets = _planned(exercise, 'sets', 1)
        reps = _planned(exercise, 'reps', 10)
        rest_time = _planned(exercise, 'rest_time', 60)
        set_duration = reps * seconds_per_rep + _planned(exercise, 'duration', 0)
        total_seconds += sets * set_duration + (sets - 1) * rest_time

    return math.ceil(total_seconds / 60) or default


def api_response(data=None, message='Success', status=200, etag=None):
    response = jsonify({'status': 'success', 'data': data, 'message': message})
    response.status_code = status
    if etag is not None:
        response.set_etag(str(etag))
    return response


def workout_id_required(f):
    #    Decorator die workout_id uit de URL controleert en naar int omzet.
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            workout_id = int(kwargs.get('workout_id'))
            if workout_id < 1:
                raise ValueError(workout_id)
        except (ValueError, TypeError):
            raise ValidationError('Invalid workout ID format')
        kwargs['workout_id'] = workout_id
        return f(*args, **kwargs)

    return decorated_function


def request_payload():
    """
    Haal de JSON-body van het request op, aangevuld met de If-Match versie.

    Notities:
        - Een lege body is toegestaan (bijv. bij start/cancel).
        - Een If-Match header met een enkele ETag vult 'version' aan als die ontbreekt.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        if request.get_data(cache=True) and request.is_json:
            raise ValidationError('Malformed JSON body')
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    payload = dict(payload)
    if 'version' not in payload and request.if_match:
        tags = request.if_match.as_set()
        if len(tags) == 1:
            payload['version'] = next(iter(tags))
    return payload
