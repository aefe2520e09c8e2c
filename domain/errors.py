"""
Error Handling Module

Defines domain exceptions and error categories for the quota service.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messaging for the API layer.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    QUOTA_EXCEEDED = "quota_exceeded"
    SERVICE_UNAVAILABLE = "service_unavailable"
    REQUEST_CANCELLED = "request_cancelled"
    CONFIGURATION_ERROR = "configuration_error"
    INVALID_REQUEST = "invalid_request"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.QUOTA_EXCEEDED: {
        "title": "Posting Quota Reached",
        "message": "You have reached the posting limit for this period.",
        "action": "Please wait before posting again.",
    },
    ErrorCategory.SERVICE_UNAVAILABLE: {
        "title": "Service Temporarily Unavailable",
        "message": "We could not verify your posting limits right now.",
        "action": "Please try again in a few moments.",
    },
    ErrorCategory.REQUEST_CANCELLED: {
        "title": "Request Cancelled",
        "message": "The request was cancelled before it could be completed.",
        "action": "Please submit your request again.",
    },
    ErrorCategory.CONFIGURATION_ERROR: {
        "title": "Invalid Quota Request",
        "message": "The request is missing information required by a posting rule.",
        "action": "Make sure the target subverse and content are provided.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap the original error for context.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class QuotaConfigurationError(DomainError):
    """
    Raised for malformed policies or calls that a policy cannot serve.

    Always a programmer error: a non-positive threshold or window, a
    duplicate policy name, or a per-scope policy evaluated without a scope.
    Never retried.
    """
    pass


class QuotaUnavailableError(DomainError):
    """
    Raised when the event store cannot answer a count.

    The caller decides the fallback; the engine never turns this into an
    allow or deny decision.
    """
    pass


class QuotaCancelledError(DomainError):
    """Raised when the caller cancels an evaluation in flight."""
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        payload = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.context:
            payload["details"] = dict(self.context)
        return payload


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context exposed to the client
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
