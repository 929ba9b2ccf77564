import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv
basedir = os.path.abspath(os.path.dirname(__file__))

ENV_FILE = find_dotenv()
if ENV_FILE:
    load_dotenv(ENV_FILE)


def _env_flag(name, default='false'):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.getenv('APP_SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
                              'sqlite:///' + os.path.join(basedir, 'app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    # Foutmeldingen van 500-responses alleen tonen buiten productie
    EXPOSE_ERROR_DETAILS = _env_flag('EXPOSE_ERROR_DETAILS')

    DEFAULT_WORKOUT_DURATION = int(os.getenv('DEFAULT_WORKOUT_DURATION', 30))
    SECONDS_PER_REP = int(os.getenv('SECONDS_PER_REP', 5))
    WORKOUTS_PER_PAGE = int(os.getenv('WORKOUTS_PER_PAGE', 10))
    MAX_WORKOUTS_PER_PAGE = int(os.getenv('MAX_WORKOUTS_PER_PAGE', 100))

    DEBUG = _env_flag('FLASK_DEBUG')


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    EXPOSE_ERROR_DETAILS = True
    LOG_LEVEL = 'DEBUG'


@dataclass(frozen=True)
class EngineSettings:
    """
    Onveranderlijke instellingen voor de workout-engine.

    Notities:
        - Wordt eenmalig opgebouwd in create_app() en opgeslagen in app.extensions.
        - Engine-functies krijgen deze instellingen expliciet mee.
    """
    default_estimated_duration: int = 30
    seconds_per_rep: int = 5
    default_sets: int = 1
    default_reps: int = 10
    default_rest_time: int = 60
    page_size: int = 10
    max_page_size: int = 100
    expose_error_details: bool = False

    @classmethod
    def from_mapping(cls, config):
        """Bouw instellingen op uit een Flask-config (of andere mapping)."""
        return cls(
            default_estimated_duration=int(config.get('DEFAULT_WORKOUT_DURATION', 30)),
            seconds_per_rep=int(config.get('SECONDS_PER_REP', 5)),
            page_size=int(config.get('WORKOUTS_PER_PAGE', 10)),
            max_page_size=int(config.get('MAX_WORKOUTS_PER_PAGE', 100)),
            expose_error_details=bool(config.get('EXPOSE_ERROR_DETAILS', False)),
        )
