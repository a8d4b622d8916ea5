"""Error taxonomy for the scan pipeline.

Every error carries a ``retryable`` flag so callers can tell transient
failures (timeouts, flaky upstreams) from permanent ones (bad input,
missing records).
"""

import enum


class VisiAIError(Exception):
    """Base class for all pipeline errors."""

    error_type = "error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(VisiAIError):
    """The scan request was malformed (e.g. not an absolute http(s) URL)."""

    error_type = "validation"


class FetchErrorKind(str, enum.Enum):
    """Why a page fetch failed."""

    DNS = "dns"
    CONNECT = "connect"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    TOO_LARGE = "too_large"
    TOO_MANY_REDIRECTS = "too_many_redirects"


# Transient network conditions worth retrying by the caller
_RETRYABLE_FETCH_KINDS = {FetchErrorKind.CONNECT, FetchErrorKind.TIMEOUT}


class FetchError(VisiAIError):
    """The target page could not be retrieved."""

    error_type = "fetch"

    def __init__(self, kind: FetchErrorKind, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        if self.kind == FetchErrorKind.HTTP_STATUS:
            return self.status_code is not None and self.status_code >= 500
        return self.kind in _RETRYABLE_FETCH_KINDS


class AnalyzerError(VisiAIError):
    """A single analyzer could not produce a result."""

    error_type = "analyzer"


class InsufficientDataError(VisiAIError):
    """No analyzer produced a usable score."""

    error_type = "insufficient_data"


class ScanTimeoutError(VisiAIError):
    """The scan as a whole exceeded its deadline."""

    error_type = "scan_timeout"
    retryable = True


class NotFoundError(VisiAIError):
    """No report exists under the requested id."""

    error_type = "not_found"


class StoreError(VisiAIError):
    """The report store failed to read or write."""

    error_type = "store"
    retryable = True
