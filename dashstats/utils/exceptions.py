from typing import Any, Optional


class AppException(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Any] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ConfigurationException(AppException):
    """Exception raised when the analytics provider cannot be configured."""

    def __init__(self, message: str = "Analytics is not configured", details: Optional[Any] = None):
        super().__init__(
            code="NOT_CONFIGURED",
            message=message,
            status_code=503,
            details=details,
        )


class AnalyticsUnavailableException(AppException):
    """Exception raised when an aggregation fails as a whole."""

    def __init__(
        self, message: str = "Failed to fetch analytics data", details: Optional[Any] = None
    ):
        super().__init__(
            code="ANALYTICS_UNAVAILABLE",
            message=message,
            status_code=500,
            details=details,
        )


class UpstreamPayloadError(ValueError):
    """Raised when an upstream payload cannot be parsed at all."""
