import os


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-prod')

    # Roster storage: 'memory' (single process) or 'sql'
    ROSTER_BACKEND = os.getenv('ROSTER_BACKEND', 'sql')

    # Database
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///sportmanager.db')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Redis (roster events are only published when set)
    REDIS_URL = os.getenv('REDIS_URL', '')
    EVENTS_CHANNEL = os.getenv('EVENTS_CHANNEL', 'matches:announcements')

    # Match defaults
    DEFAULT_VENUE_NAME = os.getenv('DEFAULT_VENUE_NAME', 'Nova Sports Soccer Field')
    DEFAULT_MIN_PLAYERS = int(os.getenv('DEFAULT_MIN_PLAYERS', '10'))
    DEFAULT_MAX_PLAYERS = int(os.getenv('DEFAULT_MAX_PLAYERS', '12'))

    CORS_ALLOW_ORIGIN = os.getenv('CORS_ALLOW_ORIGIN', '*')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    ROSTER_BACKEND = 'sql'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    REDIS_URL = ''
    LOG_LEVEL = 'DEBUG'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
