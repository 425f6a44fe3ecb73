"""
Service exceptions.
Every exception carries an error_code and the HTTP status the API layer
answers with; the app registers a single handler for the base class.
"""


class CheckinServiceException(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message, error_code=None, status_code=None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"

    def to_dict(self):
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
        }


class ConfigurationError(CheckinServiceException):
    """A required setting (secret, URL) is missing."""
    status_code = 500
    error_code = "CONFIGURATION_ERROR"


class ValidationError(CheckinServiceException):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(CheckinServiceException):
    status_code = 404
    error_code = "NOT_FOUND"


class GuestNotFoundError(NotFoundError):
    error_code = "GUEST_NOT_FOUND"

    def __init__(self, message="Guest not found"):
        super().__init__(message)


class ConflictError(CheckinServiceException):
    status_code = 409
    error_code = "CONFLICT"


class DuplicateScanTokenError(ConflictError):
    error_code = "DUPLICATE_SCAN_TOKEN"

    def __init__(self, qr_code):
        super().__init__(f"Scan token '{qr_code}' is already assigned to a guest")
        self.qr_code = qr_code


class AuthenticationError(CheckinServiceException):
    status_code = 401
    error_code = "AUTH_FAILED"


class AuthorizationError(CheckinServiceException):
    status_code = 403
    error_code = "FORBIDDEN"


class ApprovalPendingError(AuthorizationError):
    error_code = "APPROVAL_PENDING"

    def __init__(self):
        super().__init__("Your account is waiting for administrator approval")


class DataAccessError(CheckinServiceException):
    """A database read or write failed."""
    status_code = 500
    error_code = "DATA_ACCESS_ERROR"


class ExternalServiceError(CheckinServiceException):
    """The model gateway refused or failed the request. Never retried."""
    status_code = 500
    error_code = "EXTERNAL_SERVICE_ERROR"


class RateLimitedError(ExternalServiceError):
    status_code = 429
    error_code = "RATE_LIMITED"

    def __init__(self):
        super().__init__("Rate limit exceeded. Please try again later.")


class QuotaExceededError(ExternalServiceError):
    status_code = 402
    error_code = "QUOTA_EXCEEDED"

    def __init__(self):
        super().__init__("AI service unavailable. Please contact support.")


class ServiceUnavailableError(ExternalServiceError):
    status_code = 503
    error_code = "SERVICE_UNAVAILABLE"

    def __init__(self):
        super().__init__("AI service unavailable. Please try again later.")
