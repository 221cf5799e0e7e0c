"""
Retry decisions.

After every attempt the engine asks `should_retry` whether another attempt
is worth making. Time comes first: if the remaining budget cannot cover the
next wait, the answer is no regardless of what the predicates would say.
Predicates may be plain functions or coroutine functions.
"""

import inspect
from typing import TYPE_CHECKING, Optional

import httpx
import structlog

from fetch_retry.exceptions import AttemptTimeoutError

if TYPE_CHECKING:
    from fetch_retry.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)

# Failures below the HTTP layer that a fresh attempt can plausibly fix
RETRYABLE_TRANSPORT_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


def default_response_predicate(response: httpx.Response) -> bool:
    """Retry on server errors (status >= 500)."""
    return response.status_code >= 500


def default_error_predicate(error: BaseException) -> bool:
    """
    Retry on system-level transport errors and on per-attempt timeouts.

    Anything else (invalid URL, unsupported protocol, errors raised by
    caller code) is not retried.
    """
    if isinstance(error, AttemptTimeoutError):
        logger.warning(
            "Attempt cancelled by socket timeout",
            url=error.url,
            timeout_ms=error.timeout_ms,
        )
        return True
    if isinstance(error, RETRYABLE_TRANSPORT_ERRORS):
        logger.warning(
            "Transport error",
            error_type=type(error).__name__,
            error=str(error),
        )
        return True
    return False


async def should_retry(
    policy: "RetryPolicy",
    error: Optional[BaseException],
    response: Optional[httpx.Response],
    wait_time: float,
) -> bool:
    """
    Decide whether to retry after an attempt.

    Exactly one of `error` and `response` is set.

    Args:
        policy: Policy of the running fetch
        error: Exception raised by the attempt
        response: Response returned by the attempt
        wait_time: Milliseconds the engine would wait before the next attempt

    Returns:
        True if the engine should wait and try again
    """
    if policy.remaining_ms() < wait_time:
        return False

    if error is not None:
        decision = policy.error_predicate(error)
    else:
        decision = policy.response_predicate(response)

    if inspect.isawaitable(decision):
        decision = await decision
    return bool(decision)
