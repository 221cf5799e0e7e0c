"""
Custom exceptions for fetch-retry.

These exceptions separate the three failure families a retried fetch can
end in: malformed retry options (raised before any request is sent),
running out of time (per-attempt socket timeout or overall budget), and
transport errors. Transport errors are httpx exceptions and are re-raised
untouched, so they have no wrapper here.
"""


class FetchRetryError(Exception):
    """
    Base exception for all fetch-retry errors.

    All library-specific exceptions inherit from this to allow catching
    any of them with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RetryOptionsError(FetchRetryError, ValueError):
    """
    Raised when retry options are malformed.

    Each invalid field has its own message. Never retried.
    """
    pass


class FetchTimeoutError(FetchRetryError):
    """
    Raised when a fetch ran out of allotted time.

    Covers both a per-attempt socket timeout that was not retried and the
    overall retry budget running out. Consumers cannot tell the two apart
    from the exception type; `details["cause"]` records which one it was.
    """

    kind = "request-timeout"

    def __init__(self, url: str, details: dict | None = None):
        super().__init__(f"network timeout at {url}", details)
        self.url = url


class AttemptTimeoutError(FetchRetryError):
    """
    Raised when the per-attempt timer cancels an in-flight request.

    Distinct from any timeout the transport raises on its own, so the
    engine can tell its own cancellation apart from other failures.
    """

    def __init__(self, url: str, timeout_ms: float):
        super().__init__(
            f"request to {url} cancelled after {timeout_ms}ms",
            details={"url": url, "timeout_ms": timeout_ms},
        )
        self.url = url
        self.timeout_ms = timeout_ms
