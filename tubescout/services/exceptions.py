"""
Service Exceptions
Error hierarchy shared by the service layer and the API boundary
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for all service-layer errors"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for an error response body"""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(ServiceError):
    """Invalid caller input (surfaced as 400)"""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.field = field


# ============================================================================
# External Service Errors
# ============================================================================


class ExternalServiceError(ServiceError):
    """An upstream provider failed"""

    status_code = 502

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"{service}: {message}", details)
        self.service = service


class YouTubeAPIError(ExternalServiceError):
    """YouTube Data API or suggestion endpoint failure"""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("YouTube", message, details)
        self.status = status


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ServiceError):
    """Service is misconfigured"""

    status_code = 500


# ============================================================================
# Utility Functions
# ============================================================================


def error_to_http_status(error: Exception) -> int:
    """Map an exception to the HTTP status the API should answer with"""
    if isinstance(error, ServiceError):
        return error.status_code
    return 500


__all__ = [
    "ServiceError",
    "ValidationError",
    "ExternalServiceError",
    "YouTubeAPIError",
    "ConfigurationError",
    "error_to_http_status",
]
