# ABOUTME: Exception taxonomy for request validation, transport, content and discovery failures
# ABOUTME: Each error serializes to the {kind, message} shape returned across the service boundary

from enum import Enum
from typing import Any


class NetworkErrorKind(str, Enum):
    """Transport failure classification."""

    TIMEOUT = "timeout"
    CONNECTION_RESET = "connection_reset"
    DNS_FAILURE = "dns_failure"
    CONNECTION_ABORTED = "connection_aborted"
    HTTP_STATUS = "http_status"
    OTHER = "other"


RETRYABLE_KINDS = frozenset(
    {
        NetworkErrorKind.TIMEOUT,
        NetworkErrorKind.CONNECTION_RESET,
        NetworkErrorKind.DNS_FAILURE,
        NetworkErrorKind.CONNECTION_ABORTED,
    }
)


class ExtractionError(Exception):
    """Base class for every failure raised by the extraction engine."""

    kind = "extraction_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None, retryable: bool = False):
        self.message = message
        self.details = details or {}
        self.retryable = retryable
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the boundary error shape."""
        payload: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class RequestValidationError(ExtractionError):
    """Raised when an inbound request has the wrong shape."""

    kind = "validation_error"


class NetworkError(ExtractionError):
    """Raised when a document could not be fetched."""

    kind = "network_error"

    def __init__(
        self,
        error_kind: NetworkErrorKind,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        details: dict[str, Any] = {"error_kind": error_kind.value}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details, retryable=error_kind in RETRYABLE_KINDS)
        self.error_kind = error_kind
        self.url = url
        self.status_code = status_code
        self.cause = cause


class ContentNotFoundError(ExtractionError):
    """Raised when no article body could be located in a fetched document."""

    kind = "content_not_found"


class BrowserUnavailableError(ExtractionError):
    """Raised when no automatable browser runtime can be started."""

    kind = "browser_unavailable"


class LinkDiscoveryEmptyError(ExtractionError):
    """Raised when an album yields no article links at all."""

    kind = "link_discovery_empty"


class BrowserSessionError(ExtractionError):
    """Raised when a running browser page fails to navigate, evaluate or scroll."""

    kind = "browser_session_error"
