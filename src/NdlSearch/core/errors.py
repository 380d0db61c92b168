"""Error taxonomy for NdlSearch.

Every failure surfaced to callers is an ``NdlSearchError`` subclass. The set of
subclasses is closed: one per category, each exposing a machine-checkable
``category`` plus a human-readable message. User-facing phrasing per category
is produced by ``user_message`` and is not part of the error itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, Literal

if TYPE_CHECKING:
    from NdlSearch.core.models import DiagnosticRecord

ErrorCategory = Literal[
    "validation",
    "query_syntax",
    "service_diagnostic",
    "rate_limit",
    "network",
    "api",
]


class NdlSearchError(Exception):
    """Base class for all NdlSearch failures."""

    category: ErrorCategory

    def __init__(self, message: str, *, cause: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(NdlSearchError, ValueError):
    """Malformed input parameters or an unusable response shape.

    Attributes:
        problems: Individual validation messages, in discovery order.
    """

    category = "validation"

    def __init__(self, message: str, *, problems: tuple[str, ...] = (), cause: Any = None) -> None:
        super().__init__(message, cause=cause)
        self.problems = tuple(problems)

    def __str__(self) -> str:
        if not self.problems:
            return self.message
        return f"{self.message}: {'; '.join(self.problems)}"


class QuerySyntaxError(NdlSearchError):
    """CQL syntax or unsupported-feature problem reported by the service."""

    category = "query_syntax"

    def __init__(self, message: str, *, diagnostic: DiagnosticRecord | None = None) -> None:
        super().__init__(message, cause=diagnostic)
        self.diagnostic = diagnostic


class ServiceDiagnosticError(NdlSearchError):
    """Generic search failure reported through an SRU diagnostic."""

    category = "service_diagnostic"

    def __init__(self, message: str, *, diagnostic: DiagnosticRecord | None = None) -> None:
        super().__init__(message, cause=diagnostic)
        self.diagnostic = diagnostic


class RateLimitError(NdlSearchError):
    """HTTP 429 from the service.

    Attributes:
        retry_after: Raw ``Retry-After`` header value when the service sent one.
    """

    category = "rate_limit"

    def __init__(self, message: str, *, retry_after: str | None = None, cause: Any = None) -> None:
        super().__init__(message, cause=cause)
        self.retry_after = retry_after
        self.status = 429


class NetworkError(NdlSearchError):
    """Transport-level failure (connection refused, timeout, DNS)."""

    category = "network"


class ApiError(NdlSearchError):
    """Any other non-2xx HTTP status.

    Attributes:
        status: HTTP status code, or 0 when no response was received.
    """

    category = "api"

    def __init__(self, message: str, *, status: int, cause: Any = None) -> None:
        super().__init__(message, cause=cause)
        self.status = status

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status < 600


_API_STATUS_MESSAGES: Final[dict[int, str]] = {
    400: "The request was rejected. Check the search conditions.",
    401: "Authentication is required. Check your API credentials.",
    403: "Access to this resource is forbidden.",
    404: "The requested resource was not found.",
    429: "Request limit reached. Please wait before searching again.",
    500: "The server reported an error. Try again after a while.",
    503: "The service is temporarily unavailable. Try again after a while.",
}

_CATEGORY_MESSAGES: Final[dict[str, str]] = {
    "network": "A network error occurred. Check your internet connection.",
    "validation": "The input is not in the expected format. Review the search conditions.",
    "service_diagnostic": "The search service could not process the request. Check the search conditions.",
    "query_syntax": "The search query has a syntax problem. Review the search conditions.",
    "rate_limit": "Request limit reached. Please wait before searching again.",
}


def user_message(error: NdlSearchError) -> str:
    """Return the user-facing phrasing for an error category.

    Args:
        error: Any NdlSearch error.

    Returns:
        A short sentence suitable for end users.
    """
    if isinstance(error, ApiError):
        if error.status > 0:
            return _API_STATUS_MESSAGES.get(
                error.status,
                f"The API returned an error (status: {error.status}).",
            )
        return "The API returned an error. Try again after a while."
    return _CATEGORY_MESSAGES.get(error.category, "An unexpected error occurred.")


def is_retryable(error: BaseException) -> bool:
    """Return True for categories callers usually retry with backoff."""
    if isinstance(error, RateLimitError):
        return True
    return isinstance(error, ApiError) and error.is_server_error
