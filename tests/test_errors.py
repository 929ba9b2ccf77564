import dataclasses

import pytest

from config import EngineSettings, TestConfig
from techtrainer.errors.exceptions import AlreadyCompletedError, ConflictError, InvalidStateError, \
    NotFoundError, ValidationError


@pytest.fixture
def failing_app(app):
    app.config['PROPAGATE_EXCEPTIONS'] = False

    def boom():
        raise RuntimeError('database exploded')

    app.add_url_rule('/api/boom', 'boom', boom)
    return app


def test_unexpected_error_exposes_message_when_enabled(failing_app):
    resp = failing_app.test_client().get('/api/boom')

    assert resp.status_code == 500
    assert resp.get_json() == {'status': 'error', 'message': 'database exploded'}


def test_unexpected_error_hides_message_by_default(failing_app):
    settings = failing_app.extensions['techtrainer']
    failing_app.extensions['techtrainer'] = dataclasses.replace(settings, expose_error_details=False)

    resp = failing_app.test_client().get('/api/boom')

    assert resp.status_code == 500
    assert resp.get_json() == {'status': 'error', 'message': 'Internal server error'}


def test_method_not_allowed(client):
    resp = client.post('/api/workouts/stats')

    assert resp.status_code == 405
    assert resp.get_json()['message'] == 'Method not allowed'


def test_error_status_codes():
    assert ValidationError('x').status_code == 400
    assert NotFoundError('x').status_code == 404
    assert InvalidStateError('x').status_code == 400
    assert ConflictError('x').status_code == 409
    assert isinstance(AlreadyCompletedError('x'), InvalidStateError)


def test_engine_settings_from_config():
    settings = EngineSettings.from_mapping({'DEFAULT_WORKOUT_DURATION': '45', 'MAX_WORKOUTS_PER_PAGE': 20,
                                            'EXPOSE_ERROR_DETAILS': True})

    assert settings.default_estimated_duration == 45
    assert settings.max_page_size == 20
    assert settings.seconds_per_rep == 5
    assert settings.expose_error_details is True
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.page_size = 50


def test_app_settings_follow_config(settings):
    assert settings.expose_error_details is TestConfig.EXPOSE_ERROR_DETAILS
    assert settings.default_estimated_duration == 30
