import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from dotenv import load_dotenv

from stkpay.errors import ConfigurationError

load_dotenv()

ENVIRONMENTS = ('sandbox', 'production')


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///stkpay.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

    LOG_DIR = os.getenv('LOG_DIR')

    # M-Pesa (Daraja) configuration
    MPESA_CONSUMER_KEY = os.getenv('MPESA_CONSUMER_KEY')
    MPESA_CONSUMER_SECRET = os.getenv('MPESA_CONSUMER_SECRET')
    MPESA_BUSINESS_SHORTCODE = os.getenv('MPESA_BUSINESS_SHORTCODE')
    MPESA_PASSKEY = os.getenv('MPESA_PASSKEY')
    MPESA_CALLBACK_URL = os.getenv('MPESA_CALLBACK_URL')
    MPESA_ENVIRONMENT = os.getenv('MPESA_ENVIRONMENT', 'sandbox')

    # none | memory | redis
    MPESA_TOKEN_CACHE = os.getenv('MPESA_TOKEN_CACHE', 'memory')
    MPESA_HTTP_TIMEOUT = float(os.getenv('MPESA_HTTP_TIMEOUT', '30'))
    # Password timestamps use process-local time unless a zone is set, e.g. Africa/Nairobi
    MPESA_TIMEZONE = os.getenv('MPESA_TIMEZONE')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    MPESA_ENVIRONMENT = os.getenv('MPESA_ENVIRONMENT', 'production')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_DIR = None

    MPESA_CONSUMER_KEY = 'test_consumer_key'
    MPESA_CONSUMER_SECRET = 'test_consumer_secret'
    MPESA_BUSINESS_SHORTCODE = '174379'
    MPESA_PASSKEY = 'test_passkey'
    MPESA_CALLBACK_URL = 'https://example.com/api/mpesa/callback'
    MPESA_ENVIRONMENT = 'sandbox'
    MPESA_TOKEN_CACHE = 'none'
    MPESA_HTTP_TIMEOUT = 5.0
    MPESA_TIMEZONE = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@dataclass(frozen=True)
class GatewayCredentials:
    """Daraja credentials, loaded once at startup and passed to every component."""
    consumer_key: str = field(repr=False)
    consumer_secret: str = field(repr=False)
    short_code: str
    pass_key: str = field(repr=False)
    callback_url: str
    environment: str = 'sandbox'

    _REQUIRED = {
        'consumer_key': 'MPESA_CONSUMER_KEY',
        'consumer_secret': 'MPESA_CONSUMER_SECRET',
        'short_code': 'MPESA_BUSINESS_SHORTCODE',
        'pass_key': 'MPESA_PASSKEY',
        'callback_url': 'MPESA_CALLBACK_URL',
    }

    @classmethod
    def from_config(cls, mapping: Mapping[str, Any]) -> 'GatewayCredentials':
        """
        Build credentials from a config mapping (Flask ``app.config`` or ``os.environ``).

        Raises:
            ConfigurationError: If a required secret is absent or the environment is unknown
        """
        missing = [key for key in cls._REQUIRED.values() if not mapping.get(key)]
        if missing:
            raise ConfigurationError(f"Missing M-Pesa configuration: {', '.join(missing)}")

        environment = str(mapping.get('MPESA_ENVIRONMENT') or 'sandbox').strip().lower()
        if environment not in ENVIRONMENTS:
            raise ConfigurationError(
                f"MPESA_ENVIRONMENT must be 'sandbox' or 'production', got '{environment}'"
            )

        values = {attr: str(mapping[key]).strip() for attr, key in cls._REQUIRED.items()}
        return cls(environment=environment, **values)
