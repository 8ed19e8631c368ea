class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulingValidationError(AppError):
    """Raised when a scheduling request is malformed, e.g. an interval whose start is not before its end."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource does not exist within the tenant."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class MissingTenantError(AppError):
    """Raised when a request carries no center identifier."""
    def __init__(self):
        super().__init__("Center ID missing from request", status_code=401)
