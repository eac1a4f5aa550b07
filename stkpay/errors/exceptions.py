class AppError(Exception):
    status_code = 500
    error = "Application error"

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        if status_code:
            self.status_code = status_code
        self.message = message
        self.details = details

    def to_dict(self):
        body = {'error': self.error, 'message': self.message}
        if self.details is not None:
            body['details'] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    error = "Validation error"


class InvalidPhoneFormat(ValidationError):
    error = "Invalid phone number"


class PaymentNotFound(AppError):
    status_code = 404
    error = "Payment not found"


class OrderNotFound(AppError):
    status_code = 404
    error = "Order not found"


class ConfigurationError(AppError):
    error = "Configuration error"


class UpstreamError(AppError):
    """Gateway or transport failure. ``details`` holds the upstream body or transport message."""
    error = "Upstream error"

    def __init__(self, message, details=None, upstream_status=None):
        super().__init__(message, details=details)
        self.upstream_status = upstream_status


class UpstreamAuthError(UpstreamError):
    error = "Failed to obtain access token"


class UpstreamSubmitError(UpstreamError):
    error = "Failed to initiate STK Push"


class UpstreamQueryError(UpstreamError):
    error = "Failed to check payment status"


class CallbackParseError(AppError):
    error = "Error processing callback"
