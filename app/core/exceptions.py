"""
Custom exceptions for the Content Moderation Gateway.

Only request-shape problems (missing authorization, malformed body) are ever
surfaced to callers as HTTP errors. Everything else is caught at the gateway
boundary and turned into a blocking moderation result.
"""

from typing import Optional, Dict, Any


class ContentModeratorException(Exception):
    """Base exception for all content moderator related errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONTENT_MODERATOR_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        """Response body rendered for this exception."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class LLMServiceException(ContentModeratorException):
    """Exception raised when the upstream model call fails."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="LLM_SERVICE_ERROR",
            details={**(details or {}), "provider": provider}
        )


class ConfigurationException(ContentModeratorException):
    """Exception raised when a required setting is missing."""

    def __init__(
        self,
        message: str,
        setting: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={**(details or {}), "setting": setting}
        )


class ResponseParseException(ContentModeratorException):
    """Exception raised when model output cannot be turned into a result."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="RESPONSE_PARSE_ERROR",
            details=details
        )


class ValidationException(ContentModeratorException):
    """Exception raised when the inbound request is malformed."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={**(details or {}), "field": field}
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class AuthenticationException(ContentModeratorException):
    """Exception raised when the Authorization header is missing."""

    def __init__(
        self,
        message: str = "Missing authorization header",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            details=details
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"code": 401, "message": self.message}


# Exception to HTTP status code mapping
EXCEPTION_STATUS_MAPPING = {
    LLMServiceException: 503,  # Service Unavailable
    ConfigurationException: 500,  # Internal Server Error
    ResponseParseException: 502,  # Bad Gateway
    ValidationException: 400,  # Bad Request
    AuthenticationException: 401,  # Unauthorized
}


def status_code_for(exception: ContentModeratorException) -> int:
    """Look up the HTTP status for an exception, defaulting to 500."""
    return EXCEPTION_STATUS_MAPPING.get(exception.__class__, 500)
