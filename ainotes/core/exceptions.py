"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Remote store failures never escape the sync engine: they are raised by the
stores as RemoteUnreachableError and converted into local-only results.
AI refine failures are propagated to the caller.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(
        self,
        message: str = "External service error",
        code: str = "SYS_EXTERNAL_SERVICE_ERROR",
    ) -> None:
        super().__init__(message, code=code)


class RemoteUnreachableError(ExternalServiceError):
    """Raised when the remote note store cannot be contacted or rejects a call."""

    def __init__(self, message: str = "Remote note store unreachable") -> None:
        super().__init__(message, code="SYNC_REMOTE_UNREACHABLE")


class ServiceUnavailableError(ExternalServiceError):
    """Raised when the AI service is not configured."""

    def __init__(
        self,
        message: str = "AI service is currently unavailable. Please check the API key configuration.",
    ) -> None:
        super().__init__(message, code="AI_SERVICE_UNAVAILABLE")


class RefinementFailedError(ExternalServiceError):
    """Raised when the AI refine call fails."""

    def __init__(
        self,
        message: str = "Failed to refine text. Please check your connection and API key.",
    ) -> None:
        super().__init__(message, code="AI_REFINEMENT_FAILED")
