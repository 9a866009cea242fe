"""Custom exception hierarchy for country-intel.

Every error an operation can fail with derives from ``CountryIntelError`` so
the transport layer can turn it into a response with a single handler.

Exception Hierarchy:
    CountryIntelError (base)
    ├── ConfigurationError
    ├── ValidationError
    └── DataProviderError
        ├── NotFoundError
        └── UpstreamError
"""
from __future__ import annotations

from typing import Optional, Dict, Any


class CountryIntelError(Exception):
    """Base exception for all country-intel errors.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CountryIntelError):
    """Raised when there's a configuration problem."""
    pass


class ValidationError(CountryIntelError):
    """Raised when operation input is outside its declared constraints.

    Examples:
        - Empty country identifier
        - Fewer than 2 or more than 10 countries to compare
    """

    status_code = 422

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.field = field
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, code, details)


class DataProviderError(CountryIntelError):
    """Base class for errors originating at the upstream data source.

    Attributes:
        provider: Name of the provider that failed
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.provider = provider
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, code, details)


class NotFoundError(DataProviderError):
    """Raised when an identifier or query matches no upstream record."""

    status_code = 404


class UpstreamError(DataProviderError):
    """Raised on network failure or a non-success status from the data source.

    Attributes:
        upstream_status: HTTP status returned upstream, when there was one
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        upstream_status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.upstream_status = upstream_status
        details = details or {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(message, provider, code, details)


def get_error_response(error: Exception) -> Dict[str, Any]:
    """Convert any exception to an API error response.

    Args:
        error: The exception to convert

    Returns:
        Dictionary suitable for API error response
    """
    if isinstance(error, CountryIntelError):
        return error.to_dict()

    return {
        "error": "InternalError",
        "message": str(error),
        "details": {},
    }


def get_status_code(error: Exception) -> int:
    """HTTP status the transport should answer with for ``error``."""
    if isinstance(error, CountryIntelError):
        return error.status_code
    return 500
