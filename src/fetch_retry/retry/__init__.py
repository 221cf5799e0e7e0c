"""
Retry orchestration for HTTP requests.

Main Components:
    - RetryEngine: Drives attempts, waits and backoff for one fetch
    - resolve_policy: Builds the per-call RetryPolicy from options,
      environment defaults and the external deadline
    - should_retry: Decides after each attempt whether to go again
    - attempt_timeout: Per-attempt socket timeout scope
    - RetryMetadata: Summary attached to the final response

Usage:
    >>> from fetch_retry.retry import RetryEngine
    >>> engine = RetryEngine(transport)
    >>> response = await engine.fetch(url, retry_options={"retry_backoff": 3})
"""

from fetch_retry.retry.decision import (
    default_error_predicate,
    default_response_predicate,
    should_retry,
)
from fetch_retry.retry.engine import RetryEngine, retry_delay, retrying_fetch
from fetch_retry.retry.metadata import RetryMetadata
from fetch_retry.retry.policy import (
    RetryOptions,
    RetryPolicy,
    check_parameters,
    resolve_policy,
)
from fetch_retry.retry.timeout import attempt_timeout

__all__ = [
    "RetryEngine",
    "RetryMetadata",
    "RetryOptions",
    "RetryPolicy",
    "attempt_timeout",
    "check_parameters",
    "default_error_predicate",
    "default_response_predicate",
    "resolve_policy",
    "retry_delay",
    "retrying_fetch",
    "should_retry",
]
