"""
Utils Package
Utility functions and helpers
"""

from stkpay.utils.logger import get_logger, configure_app_logging, RequestLogger, redact
from stkpay.utils.observability import PaymentEventLogger, RecordingObserver
from stkpay.utils.validators import normalize_phone, validate_amount

__all__ = [
    'get_logger',
    'configure_app_logging',
    'RequestLogger',
    'redact',
    'PaymentEventLogger',
    'RecordingObserver',
    'normalize_phone',
    'validate_amount',
]
