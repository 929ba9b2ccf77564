import logging
from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from config import Config, EngineSettings

logger = logging.getLogger(__name__)

# Initialiseer extensies globaal voor gebruik in de applicatiefactory
db = SQLAlchemy()
migrate = Migrate()
login = LoginManager()


@login.user_loader
def load_user(user_id):
    # Laad een gebruikersobject op basis van de user_id voor Flask-Login.
    from techtrainer.models import User  # Import hier om circulaire imports te vermijden
    try:
        user = db.session.get(User, int(user_id))
        if not user:
            logger.debug(f"Geen gebruiker gevonden voor id {user_id}")
        return user
    except (ValueError, TypeError):
        logger.error(f"Ongeldige user_id in sessie: {user_id!r}")
        return None


@login.unauthorized_handler
def unauthorized():
    return jsonify({'status': 'error', 'message': 'Authentication required'}), 401


def get_settings():
    """Haal de EngineSettings van de actieve applicatie op."""
    return current_app.extensions['techtrainer']


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    # Instellingen eenmalig vastleggen; de engine leest alleen deze kopie
    app.extensions['techtrainer'] = EngineSettings.from_mapping(app.config)

    # Initialiseer extensies met de app
    db.init_app(app)  # Database-ORM
    migrate.init_app(app, db)  # Database-migraties
    login.init_app(app)  # Gebruikerssessies

    # Registreer blueprints voor routes en errorhandling
    from techtrainer.errors import bp as errors_bp
    from techtrainer.workouts import bp as workouts_bp
    from techtrainer.progress import bp as progress_bp
    app.register_blueprint(errors_bp)
    app.register_blueprint(workouts_bp, url_prefix='/api/workouts')
    app.register_blueprint(progress_bp, url_prefix='/api/progress')

    # Importeer modellen om database-tabellen te registreren
    from techtrainer import models

    logger.debug("create_app() uitgevoerd, blueprints geregistreerd")
    return app
