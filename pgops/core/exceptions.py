"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Transport failures are not wrapped; they surface as httpx.HTTPError.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="SYS_CONFIGURATION_ERROR")


class ResolutionError(ApplicationError):
    """Raised when a database name cannot be resolved to a single database."""

    def __init__(self, message: str = "Database not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class CommandAborted(ApplicationError):
    """Raised when a command precondition does not hold."""

    def __init__(self, message: str = "Command aborted") -> None:
        super().__init__(message, code="CMD_ABORTED")


class ApiResponseError(ApplicationError):
    """Raised when an API answers with a body that cannot be understood."""

    def __init__(self, message: str = "Unexpected API response") -> None:
        super().__init__(message, code="API_BAD_RESPONSE")
