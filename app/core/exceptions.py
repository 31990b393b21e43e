from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationFailedError(AppException):
    """A mutation was rejected; the prior state is left untouched."""
    def __init__(self, message: str, error_code: str = "VALIDATION_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code=error_code,
            details=details
        )

class OverrideValidationError(ValidationFailedError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="INVALID_OVERRIDE", details=details)

class CriteriaWeightError(ValidationFailedError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="INVALID_CRITERIA_WEIGHTS", details=details)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            message=f"{entity} '{entity_id}' not found",
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": str(entity_id)}
        )

class AIError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="AI_SERVICE_UNAVAILABLE",
            details=details
        )

class AIKillSwitchError(AIError):
    def __init__(self):
        super().__init__(message="AI services are currently offline for maintenance.")
        self.error_code = "AI_KILL_SWITCH_ACTIVE"

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not identify the acting employee"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
