"""
fetch-retry: HTTP requests with retry, exponential backoff and timeouts.

One call to `retrying_fetch` performs one logical request:
- Exponential backoff with jitter between attempts
- Per-attempt socket timeout, independent of the overall budget
- Overall time budget, clamped to an external execution deadline
- Pluggable (sync or async) retry predicates for responses and errors

Transport: httpx
"""

import logging

from fetch_retry.config import Settings
from fetch_retry.exceptions import (
    AttemptTimeoutError,
    FetchRetryError,
    FetchTimeoutError,
    RetryOptionsError,
)
from fetch_retry.logging_config import configure_logging
from fetch_retry.retry import RetryEngine, RetryMetadata, RetryOptions, retrying_fetch
from fetch_retry.transport import BaseTransport, HttpxTransport

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AttemptTimeoutError",
    "BaseTransport",
    "FetchRetryError",
    "FetchTimeoutError",
    "HttpxTransport",
    "RetryEngine",
    "RetryMetadata",
    "RetryOptions",
    "RetryOptionsError",
    "Settings",
    "configure_logging",
    "retrying_fetch",
]
