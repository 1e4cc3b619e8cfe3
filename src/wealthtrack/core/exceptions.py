"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class ProviderError(AppError):
    """Raised by a price provider when a request fails or returns unusable data."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}", code="PROVIDER_ERROR")


class RefreshInProgressError(AppError):
    """Raised when a price refresh is requested while another one is running."""

    def __init__(self):
        super().__init__("A price refresh is already in progress", code="REFRESH_IN_PROGRESS")


class ResolutionCancelled(AppError):
    """Raised when the caller abandons an in-flight price resolution."""

    def __init__(self):
        super().__init__("Price resolution was cancelled", code="CANCELLED")
