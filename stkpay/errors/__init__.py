from stkpay.errors.exceptions import (
    AppError,
    CallbackParseError,
    ConfigurationError,
    InvalidPhoneFormat,
    OrderNotFound,
    PaymentNotFound,
    UpstreamAuthError,
    UpstreamError,
    UpstreamQueryError,
    UpstreamSubmitError,
    ValidationError,
)

__all__ = [
    'AppError',
    'ValidationError',
    'InvalidPhoneFormat',
    'PaymentNotFound',
    'OrderNotFound',
    'ConfigurationError',
    'UpstreamError',
    'UpstreamAuthError',
    'UpstreamSubmitError',
    'UpstreamQueryError',
    'CallbackParseError',
]
