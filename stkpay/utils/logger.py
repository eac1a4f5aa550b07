"""
Logging Configuration
Centralized logging setup for the STK Push service
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Mapping

# Payment fields that never reach a log line unmasked
PHONE_FIELDS = {'phone_number', 'payer_phone', 'PhoneNumber', 'PartyA', 'phoneNumber', 'msisdn'}
SECRET_FIELDS = {'password', 'Password', 'access_token', 'token', 'consumer_secret', 'pass_key'}
RECEIPT_FIELDS = {'receipt_number', 'MpesaReceiptNumber', 'mpesa_receipt_number'}


def _mask_phone(value: Any) -> str:
    digits = str(value)
    if len(digits) <= 3:
        return '***'
    return '*' * (len(digits) - 3) + digits[-3:]


def _mask_receipt(value: Any) -> str:
    text = str(value)
    return text[:3] + '*' * max(len(text) - 3, 0)


def redact(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``fields`` with sensitive payment values masked.

    Nested dicts are redacted recursively; None values are left alone.
    """
    redacted = {}
    for key, value in fields.items():
        if value is None:
            redacted[key] = None
        elif isinstance(value, Mapping):
            redacted[key] = redact(value)
        elif key in SECRET_FIELDS:
            redacted[key] = '***'
        elif key in PHONE_FIELDS:
            redacted[key] = _mask_phone(value)
        elif key in RECEIPT_FIELDS:
            redacted[key] = _mask_receipt(value)
        else:
            redacted[key] = value
    return redacted


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        logger.setLevel(logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(levelname)s - %(name)s - %(message)s'))
        logger.addHandler(console_handler)

        log_dir = os.getenv('LOG_DIR')
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'stkpay.log'),
                maxBytes=10485760,  # 10MB
                backupCount=10
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)

    return logger


def configure_app_logging(app):
    """
    Configure logging for the Flask application

    Args:
        app: Flask application instance
    """
    app.logger.setLevel(logging.INFO)

    log_dir = app.config.get('LOG_DIR')
    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)

    error_handler = RotatingFileHandler(
        os.path.join(log_dir, 'error.log'),
        maxBytes=10485760,
        backupCount=10
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s\n%(pathname)s:%(lineno)d',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    app.logger.addHandler(error_handler)


class RequestLogger:
    """Middleware to log all requests"""

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize request logging"""

        @app.before_request
        def log_request():
            from flask import request
            logger = get_logger('request')
            logger.info(
                f'{request.method} {request.path} - '
                f'IP: {request.remote_addr} - '
                f'User-Agent: {request.headers.get("User-Agent", "Unknown")}'
            )

        @app.after_request
        def log_response(response):
            from flask import request
            logger = get_logger('response')
            logger.info(
                f'{request.method} {request.path} - '
                f'Status: {response.status_code} - '
                f'IP: {request.remote_addr}'
            )
            return response
