import os


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes')


class BaseConfig:
    """Base configuration shared across all environments."""

    # Flask core
    SECRET_KEY = os.environ.get('SECRET_KEY', 'fallback-secret-key-change-me')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = True

    # Database (also backs the per-user key/value store)
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'SQLALCHEMY_DATABASE_URI', 'sqlite:///studypal.db'
    )

    # AI provider settings
    AI_PROVIDER = os.environ.get('AI_PROVIDER', 'gemini')
    AI_MODEL_BASIC = os.environ.get('AI_MODEL_BASIC', 'gemini-2.5-flash')
    AI_MODEL_ADVANCED = os.environ.get('AI_MODEL_ADVANCED', 'gemini-2.5-pro')

    # AI API keys
    GOOGLE_API_KEY = os.environ.get('GOOGLE_API_KEY', '')
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
    ANTHROPIC_API_KEY = os.environ.get('ANTHROPIC_API_KEY', '')

    # Calendar-day bucketing for analytics and date display
    DISPLAY_TIMEZONE_OFFSET = float(
        os.environ.get('DISPLAY_TIMEZONE_OFFSET', '0')
    )

    # Practice tests
    PRACTICE_MAX_QUESTIONS = int(os.environ.get('PRACTICE_MAX_QUESTIONS', '20'))

    # File logging (disabled when max bytes is 0)
    LOG_FILE_MAX_BYTES = int(os.environ.get('LOG_FILE_MAX_BYTES', '0'))
    LOG_FILE_BACKUP_COUNT = int(os.environ.get('LOG_FILE_BACKUP_COUNT', '3'))
    LOG_FORMAT = os.environ.get(
        'LOG_FORMAT', '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )


class DevelopmentConfig(BaseConfig):
    """Development environment configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'SQLALCHEMY_DATABASE_URI', 'sqlite:///studypal-dev.db'
    )


class ProductionConfig(BaseConfig):
    """Production environment configuration."""

    DEBUG = False
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE', 'true')
    LOG_FILE_MAX_BYTES = int(os.environ.get('LOG_FILE_MAX_BYTES', str(5 * 1024 * 1024)))


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret-key'
    SERVER_NAME = 'localhost'
    AI_PROVIDER = 'gemini'
    GOOGLE_API_KEY = 'test-google-key'
    DISPLAY_TIMEZONE_OFFSET = 0
    LOG_FILE_MAX_BYTES = 0


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
