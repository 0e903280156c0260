"""
Error taxonomy for approval, scheduling and publishing operations.

Each error carries the HTTP status it maps to; the API layer turns any
``SchedulingError`` into a JSON error body.
"""
from typing import Any, Dict, Optional


class SchedulingError(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(SchedulingError):
    """Missing or invalid input, e.g. a rejection without a reason."""
    status_code = 400
    error_code = "VALIDATION_ERROR"


class PreconditionError(SchedulingError):
    """A prerequisite stage has not been completed yet."""
    status_code = 400
    error_code = "PRECONDITION_FAILED"


class NotFoundError(SchedulingError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, id: Any = None):
        message = f"{resource} not found" if id is None else f"{resource} '{id}' not found"
        super().__init__(message, {"resource": resource, "id": id})


class TenantMismatchError(SchedulingError):
    """The resource exists but belongs to another tenant."""
    status_code = 403
    error_code = "FORBIDDEN"


class ExternalServiceError(SchedulingError):
    """The external scheduler or content API reported a failure."""
    status_code = 500
    error_code = "EXTERNAL_SERVICE_ERROR"


class PersistenceError(SchedulingError):
    status_code = 500
    error_code = "PERSISTENCE_ERROR"
