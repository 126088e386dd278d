"""Error taxonomy shared by the services and the HTTP layer."""

from typing import Dict, List, Optional

from pydantic import ValidationError


class JobBoardError(Exception):
    """Base class for errors surfaced to API callers."""
    
    status_code: int = 500
    error: str = "JobBoardError"
    default_message: str = "An unexpected error occurred"
    
    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
    
    def details(self) -> Optional[Dict[str, object]]:
        """Extra structured data for the error response."""
        return None


class Unauthorized(JobBoardError):
    status_code = 401
    error = "Unauthorized"
    default_message = "Authentication required"


class Forbidden(JobBoardError):
    status_code = 403
    error = "Forbidden"
    default_message = "You are not allowed to perform this action"


class NotFound(JobBoardError):
    status_code = 404
    error = "NotFound"
    default_message = "Resource not found"


class Conflict(JobBoardError):
    status_code = 409
    error = "Conflict"
    default_message = "Resource already exists"


class DuplicateApplication(Conflict):
    error = "DuplicateApplication"
    default_message = "You have already applied to this job"


class ValidationFailed(JobBoardError):
    """Schema violation with field-level messages."""
    
    status_code = 422
    error = "ValidationFailed"
    default_message = "Validation failed"
    
    def __init__(self, field_errors: Dict[str, List[str]], message: Optional[str] = None):
        self.field_errors = field_errors
        super().__init__(message)
    
    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]})
    
    @classmethod
    def from_pydantic(cls, exc: ValidationError, prefix: Optional[str] = None) -> "ValidationFailed":
        """Collapse pydantic errors into dotted-path keyed messages."""
        field_errors: Dict[str, List[str]] = {}
        for err in exc.errors():
            parts = [str(p) for p in err.get("loc", ())]
            if prefix:
                parts.insert(0, prefix)
            key = ".".join(parts) or "__root__"
            field_errors.setdefault(key, []).append(err.get("msg", "Invalid value"))
        return cls(field_errors)
    
    def details(self) -> Optional[Dict[str, object]]:
        return {"field_errors": self.field_errors}


class InternalError(JobBoardError):
    status_code = 500
    error = "InternalError"


class StorageError(InternalError):
    status_code = 502
    error = "StorageError"
    default_message = "File storage is unavailable"
