from flask import Flask
from flask_cors import CORS

from stkpay.config import GatewayCredentials, config
from stkpay.extensions import db, migrate, redis_client


def create_app(config_name='development'):
    """Application factory pattern"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Fails startup when M-Pesa secrets are missing
    credentials = GatewayCredentials.from_config(app.config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    redis_client.init_app(app)
    CORS(app)

    from stkpay.utils.logger import RequestLogger, configure_app_logging
    configure_app_logging(app)
    RequestLogger(app)

    from stkpay import models  # noqa: F401  (register tables with SQLAlchemy)

    app.extensions['mpesa'] = build_orchestrator(app, credentials)

    # Register blueprints
    from stkpay.api import register_blueprints
    register_blueprints(app)

    # Error handlers
    register_error_handlers(app)

    return app


def build_orchestrator(app, credentials):
    """Wire the payment orchestrator with the configured token cache"""
    from stkpay.errors import ConfigurationError
    from stkpay.mpesa import MemoryTokenCache, PaymentOrchestrator, RedisTokenCache, local_clock
    from stkpay.services.payment_service import PaymentService
    from stkpay.utils.observability import PaymentEventLogger

    cache_kind = (app.config.get('MPESA_TOKEN_CACHE') or 'none').lower()
    if cache_kind == 'memory':
        token_cache = MemoryTokenCache()
    elif cache_kind == 'redis':
        token_cache = RedisTokenCache(redis_client, key=f'mpesa:access_token:{credentials.short_code}')
    elif cache_kind == 'none':
        token_cache = None
    else:
        raise ConfigurationError(f"MPESA_TOKEN_CACHE must be 'none', 'memory' or 'redis', got '{cache_kind}'")

    return PaymentOrchestrator(
        credentials,
        store=PaymentService,
        token_cache=token_cache,
        timeout=app.config.get('MPESA_HTTP_TIMEOUT', 30),
        clock=local_clock(app.config.get('MPESA_TIMEZONE')),
        observer=PaymentEventLogger()
    )


def register_error_handlers(app):
    """Register error handlers"""
    from flask import jsonify
    from stkpay.errors import AppError

    @app.errorhandler(AppError)
    def app_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'Bad request', 'message': str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found', 'message': str(error)}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error', 'message': str(error)}), 500
