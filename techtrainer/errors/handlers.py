import logging
from flask import jsonify
from techtrainer import db, get_settings
from techtrainer.errors import bp
from techtrainer.errors.exceptions import WorkoutError

logger = logging.getLogger(__name__)


def error_response(message, status_code, errors=None):
    payload = {'status': 'error', 'message': message}
    if errors:
        payload['errors'] = errors
    return jsonify(payload), status_code


@bp.app_errorhandler(WorkoutError)
def workout_error(error):
    db.session.rollback()
    logger.debug(f"{type(error).__name__}: {error.message}")
    return error_response(error.message, error.status_code, error.errors)


@bp.app_errorhandler(404)
def not_found_error(error):
    return error_response('Resource not found', 404)


@bp.app_errorhandler(405)
def method_not_allowed_error(error):
    return error_response('Method not allowed', 405)


@bp.app_errorhandler(500)
def internal_error(error):
    db.session.rollback()
    original = getattr(error, 'original_exception', None) or error
    logger.error(f"Onverwachte fout: {original}", exc_info=original)
    if get_settings().expose_error_details:
        return error_response(str(original), 500)
    return error_response('Internal server error', 500)
