import logging
import os
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv
from flask import Flask, redirect, url_for

from studypal import rendering
from studypal.config import config_map
from studypal.extensions import db, login_manager, migrate, csrf

__version__ = '0.4.0'


def create_app(config_name=None):
    """Application factory for creating the Flask app instance.

    Args:
        config_name: Configuration name ('development', 'production' or
                     'testing'). Defaults to FLASK_ENV or 'development'.

    Returns:
        Configured Flask application instance.
    """
    root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    # Load environment variables from the appropriate .env file
    env = config_name or os.environ.get('FLASK_ENV', 'development')
    env_file = os.path.join(root_dir, f'.env.{env}')
    if os.path.exists(env_file):
        load_dotenv(env_file)

    # Also load a local .env if it exists (overrides the environment-specific one)
    dotenv_path = os.path.join(root_dir, '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path, override=True)

    # Determine final config name after env files are loaded
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)

    config_class = config_map.get(config_name, config_map['development'])
    app.config.from_object(config_class)

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    # Registers the Flask-Login user loader
    from studypal.models import user  # noqa: F401

    _register_blueprints(app)

    rendering.init_app(app)

    @app.context_processor
    def inject_version():
        return dict(app_version=__version__)

    @app.route('/')
    def index():
        return redirect(url_for('dashboard.index'))

    with app.app_context():
        db.create_all()

    return app


def _configure_logging(app):
    """Set up RotatingFileHandler on the root logger."""
    max_bytes = app.config.get('LOG_FILE_MAX_BYTES', 0)
    if not max_bytes:
        return

    log_dir = os.path.join(app.instance_path, 'logs')
    os.makedirs(log_dir, exist_ok=True)

    log_file = os.path.join(log_dir, 'studypal.log')
    handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=app.config.get('LOG_FILE_BACKUP_COUNT', 3),
    )
    handler.setFormatter(logging.Formatter(
        app.config.get('LOG_FORMAT', '%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    ))
    handler.setLevel(logging.DEBUG)

    root = logging.getLogger()
    root.addHandler(handler)
    if root.level == logging.WARNING:
        root.setLevel(logging.DEBUG)


def _register_blueprints(app):
    """Register all application blueprints."""
    from studypal.views.auth import auth_bp
    from studypal.views.dashboard import dashboard_bp
    from studypal.views.study import study_bp
    from studypal.views.help import help_bp
    from studypal.views.practice import practice_bp
    from studypal.views.progress import progress_bp
    from studypal.views.history import history_bp
    from studypal.views.student import student_bp
    from studypal.views.analytics import analytics_bp
    from studypal.views.profile import profile_bp
    from studypal.views.settings import settings_bp
    from studypal.views.api import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(study_bp)
    app.register_blueprint(help_bp)
    app.register_blueprint(practice_bp)
    app.register_blueprint(progress_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(api_bp)
