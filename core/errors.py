"""
Error kinds raised by the service layer.

Each kind carries a stable machine-readable ``code`` and the HTTP status
the API maps it to.
"""
from typing import Any, Dict


class ServiceError(Exception):
    """Base exception for contract payment errors."""

    code = "service_error"
    status_code = 500
    default_message = "Service error"

    def __init__(self, message: str | None = None, reason: str | None = None) -> None:
        self.message = message or self.default_message
        self.reason = reason
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.reason:
            body["reason"] = self.reason
        return body


class Unauthenticated(ServiceError):
    """Raised when no profile can be resolved for the request."""

    code = "unauthenticated"
    status_code = 401
    default_message = "Unknown or missing profile"


class Forbidden(ServiceError):
    """Raised when the profile has the wrong role or does not own the resource."""

    code = "forbidden"
    status_code = 403
    default_message = "Not allowed"


class NotFound(ServiceError):
    """Raised when a looked-up record does not exist for the requester."""

    code = "not_found"
    status_code = 404
    default_message = "Not found"


class BadRequest(ServiceError):
    """Raised when numeric or date input is malformed."""

    code = "bad_request"
    status_code = 400
    default_message = "Malformed request"


class InvalidOperation(ServiceError):
    """Raised when a business rule rejects a transactional operation."""

    code = "invalid_operation"
    status_code = 400
    default_message = "Operation not permitted"
