"""
Custom exceptions for the LicenseChain client library.

Every error exposes a machine-readable ``kind`` plus a human ``description``,
``failure_reason`` and ``recovery_suggestion`` for display or logging.
"""

from typing import Optional


class LicenseChainError(Exception):
    """Base exception for LicenseChain client errors."""

    kind = "unknown"
    label = "Unknown error occurred"
    failure_reason = "An unexpected error occurred"
    recovery_suggestion = "Please try again or contact support"

    def __init__(self, message: Optional[str] = None):
        self.message = message
        super().__init__(self.description)

    @property
    def description(self) -> str:
        if self.message:
            return f"{self.label}: {self.message}"
        return self.label


class ConfigurationError(LicenseChainError):
    """Raised when client configuration is invalid."""

    kind = "configuration"
    label = "Configuration error"
    failure_reason = "The client configuration is invalid"
    recovery_suggestion = "Please check the client configuration"


class InvalidApiKeyError(ConfigurationError):
    """Raised when the API key is missing or empty."""

    kind = "invalid_api_key"
    label = "Invalid API key provided"
    failure_reason = "The API key is missing or invalid"
    recovery_suggestion = "Please check your API key and try again"


class InvalidUrlError(LicenseChainError):
    """Raised when a request URL cannot be composed."""

    kind = "invalid_url"
    label = "Invalid URL"
    failure_reason = "The URL could not be constructed"
    recovery_suggestion = "Please check the base URL configuration"


class InvalidResponseError(LicenseChainError):
    """Raised when a response body cannot be parsed or decoded."""

    kind = "invalid_response"
    label = "Invalid response from server"
    failure_reason = "The server response could not be parsed"
    recovery_suggestion = "Please try again later or contact support"


class NetworkError(LicenseChainError):
    """Raised when the transport fails (connection, timeout, DNS, TLS)."""

    kind = "network"
    label = "Network error"
    failure_reason = "A network connection error occurred"
    recovery_suggestion = "Please check your internet connection and try again"

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)


class HTTPError(LicenseChainError):
    """Raised when the server answers with a non-2xx status."""

    kind = "http"

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)

    @property
    def description(self) -> str:
        return f"HTTP error {self.status_code}: {self.message}"

    @property
    def failure_reason(self) -> str:
        return f"HTTP request failed with status code {self.status_code}"

    @property
    def recovery_suggestion(self) -> str:
        status = self.status_code
        if status == 400:
            return "Please check your request parameters"
        if status == 401:
            return "Please check your API key"
        if status == 403:
            return "You don't have permission to access this resource"
        if status == 404:
            return "The requested resource was not found"
        if status == 429:
            return "Please wait before making another request"
        if 500 <= status <= 599:
            return "Please try again later or contact support"
        return "Please try again"


class ValidationError(LicenseChainError):
    """Raised when input data fails validation."""

    kind = "validation"
    label = "Validation error"
    failure_reason = "The request data failed validation"
    recovery_suggestion = "Please check your input data and try again"


class AuthenticationError(LicenseChainError):
    """Raised when authentication fails, e.g. a bad webhook signature."""

    kind = "authentication"
    label = "Authentication error"
    failure_reason = "Authentication failed"
    recovery_suggestion = "Please check your API key and try again"


class NotFoundError(LicenseChainError):
    """Raised when a resource does not exist."""

    kind = "not_found"
    label = "Not found"
    failure_reason = "The requested resource was not found"
    recovery_suggestion = "The requested resource may have been moved or deleted"


class RateLimitError(LicenseChainError):
    """Raised when too many requests were made."""

    kind = "rate_limit"
    label = "Rate limit exceeded"
    failure_reason = "Too many requests were made"
    recovery_suggestion = "Please wait before making another request"


class ServerError(LicenseChainError):
    """Raised on an internal server failure."""

    kind = "server"
    label = "Server error"
    failure_reason = "An internal server error occurred"
    recovery_suggestion = "Please try again later or contact support"


class UnknownError(LicenseChainError):
    """Raised when a call fails without any captured error."""
    pass
