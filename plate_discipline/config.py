"""
Configuration management for the Plate Discipline Projection engine.

Loads configuration from environment variables with sensible defaults
for development. The engine itself never reads the clock or the
environment; everything it needs (including the season) is taken from
here and passed in explicitly.
"""

import logging
import os
from datetime import date
from logging.handlers import RotatingFileHandler
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # MLB Stats API
    MLB_STATS_API_BASE_URL = os.environ.get(
        'MLB_STATS_API_BASE_URL',
        'https://statsapi.mlb.com/api/v1'
    )
    MLB_API_TIMEOUT = int(os.environ.get('MLB_API_TIMEOUT', '30'))
    MLB_API_RETRIES = int(os.environ.get('MLB_API_RETRIES', '3'))

    # Response cache
    CACHE_ENABLED = os.environ.get('CACHE_ENABLED', 'true').lower() == 'true'
    CACHE_DEFAULT_TTL = int(os.environ.get('CACHE_DEFAULT_TTL', '900'))

    # Season used when a caller does not name one
    DEFAULT_SEASON = int(os.environ.get('DEFAULT_SEASON', str(date.today().year)))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')

    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    DEBUG = True
    CACHE_ENABLED = False
    MLB_API_RETRIES = 0
    DEFAULT_SEASON = 2024


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    LOG_FILE = os.environ.get('LOG_FILE', 'logs/plate_discipline.log')


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get configuration class based on PLATE_DISCIPLINE_ENV environment variable."""
    env = os.environ.get('PLATE_DISCIPLINE_ENV', 'development')
    return config.get(env, config['default'])


def configure_logging(config_class=None, logger_name: Optional[str] = 'plate_discipline') -> logging.Logger:
    """
    Configure logging for the engine and its services.

    Args:
        config_class: Configuration class to use. If None, uses get_config().
        logger_name: Logger to attach handlers to (package root by default)

    Returns:
        The configured logger
    """
    if config_class is None:
        config_class = get_config()

    logger = logging.getLogger(logger_name)
    level = getattr(logging, str(config_class.LOG_LEVEL).upper(), logging.INFO)

    # Reconfiguring replaces earlier handlers instead of stacking duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if config_class.LOG_FILE and not config_class.TESTING:
        log_dir = os.path.dirname(config_class.LOG_FILE)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # File handler for production
        file_handler = RotatingFileHandler(
            config_class.LOG_FILE,
            maxBytes=10240000,  # 10 MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    logger.setLevel(level)
    return logger
