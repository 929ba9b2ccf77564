from flask import request
from flask_login import current_user, login_required
from techtrainer import get_settings
from techtrainer.workouts import bp
from techtrainer.workouts import lifecycle, queries, stats
from techtrainer.workouts.utils import api_response, request_payload, workout_id_required


@bp.route('', methods=['POST'])
@login_required
def create_workout():
    workout = lifecycle.create_workout(current_user, request_payload(), get_settings())
    return api_response(workout.to_dict(), 'Workout created successfully', 201, etag=workout.version)


@bp.route('', methods=['GET'])
@login_required
def list_workouts():
    data = queries.list_workouts(current_user.id, request.args, get_settings())
    return api_response(data, 'Workouts retrieved successfully')


@bp.route('/stats', methods=['GET'])
@login_required
def workout_stats():
    data = stats.workout_stats(current_user.id, request.args.get('timeframe'))
    return api_response(data, 'Workout statistics retrieved successfully')


@bp.route('/<workout_id>', methods=['GET'])
@login_required
@workout_id_required
def get_workout(workout_id):
    workout, details = queries.get_workout_details(current_user.id, workout_id)
    return api_response(workout.to_dict(details), 'Workout retrieved successfully', etag=workout.version)


@bp.route('/<workout_id>', methods=['PUT', 'PATCH'])
@login_required
@workout_id_required
def update_workout(workout_id):
    workout = lifecycle.update_workout(current_user.id, workout_id, request_payload(), get_settings())
    return api_response(workout.to_dict(), 'Workout updated successfully', etag=workout.version)


@bp.route('/<workout_id>', methods=['DELETE'])
@login_required
@workout_id_required
def delete_workout(workout_id):
    deleted_id = lifecycle.delete_workout(current_user.id, workout_id)
    return api_response({'id': deleted_id}, 'Workout deleted successfully')


@bp.route('/<workout_id>/start', methods=['POST'])
@login_required
@workout_id_required
def start_workout(workout_id):
    workout = lifecycle.start_workout(current_user.id, workout_id, request_payload())
    return api_response(workout.to_dict(), 'Workout started successfully', etag=workout.version)


@bp.route('/<workout_id>/complete', methods=['POST'])
@login_required
@workout_id_required
def complete_workout(workout_id):
    workout, progress = lifecycle.complete_workout(current_user.id, workout_id, request_payload())
    data = {'workout': workout.to_dict(), 'progress': progress.to_dict()}
    return api_response(data, 'Workout completed successfully', etag=workout.version)


@bp.route('/<workout_id>/cancel', methods=['POST'])
@login_required
@workout_id_required
def cancel_workout(workout_id):
    workout = lifecycle.cancel_workout(current_user.id, workout_id, request_payload())
    return api_response(workout.to_dict(), 'Workout cancelled successfully', etag=workout.version)


@bp.route('/<workout_id>/clone', methods=['POST'])
@login_required
@workout_id_required
def clone_workout(workout_id):
    clone = lifecycle.clone_workout(current_user.id, workout_id, request_payload())
    return api_response(clone.to_dict(), 'Workout cloned successfully', 201, etag=clone.version)
