class ServiceError(Exception):
    """Base for every error that is mapped to an API response."""

    status_code = 500
    reason = "ServerError"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.message = message
        if reason:
            self.reason = reason


class ValidationError(ServiceError):
    status_code = 400
    reason = "ValidationError"


class AuthError(ServiceError):
    status_code = 401
    reason = "AuthError"


class QuotaDenied(ServiceError):
    status_code = 403
    reason = "QuotaDenied"


class Forbidden(ServiceError):
    status_code = 403
    reason = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    reason = "NotFound"


class PaymentNotVerified(ServiceError):
    status_code = 400
    reason = "NotPaid"


class UniquenessConflict(ServiceError):
    status_code = 409
    reason = "Conflict"


class AlreadyExists(UniquenessConflict):
    reason = "AlreadyExists"


class PaymentAlreadyVerified(UniquenessConflict):
    reason = "AlreadyVerified"


class ConsistencyError(ServiceError):
    """Stored state references data that does not exist."""

    status_code = 500
    reason = "ConsistencyError"


class InfrastructureError(ServiceError):
    status_code = 503
    reason = "InfrastructureError"


class GatewayError(InfrastructureError):
    status_code = 502
    reason = "GatewayError"
