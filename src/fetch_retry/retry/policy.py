"""
Retry options and per-call retry policy resolution.

A RetryPolicy is built once at the start of each fetch from (lowest to
highest priority) hard defaults, environment settings, the external
deadline and the caller's RetryOptions. Passing `retry_options=False`
disables retries entirely and resolves to None.
"""

import time
from dataclasses import dataclass, fields
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional, Union

import httpx
import structlog

from fetch_retry.config import Settings, get_settings
from fetch_retry.exceptions import RetryOptionsError
from fetch_retry.retry.decision import default_error_predicate, default_response_predicate

logger = structlog.get_logger(__name__)

ResponsePredicate = Callable[[httpx.Response], Union[bool, Awaitable[bool]]]
ErrorPredicate = Callable[[BaseException], Union[bool, Awaitable[bool]]]


@dataclass(frozen=True)
class RetryOptions:
    """
    Caller-supplied retry options. Every field is optional.

    Durations are in milliseconds. None means "use the default".

    Attributes:
        retry_max_duration: Total time allowed across attempts and waits
        retry_initial_delay: Wait before the first retry
        retry_backoff: Integer factor the wait is multiplied by each round
        retry_on_http_response: Decides whether a response should be retried
        retry_on_http_error: Decides whether a transport error should be retried
        socket_timeout: Per-attempt deadline; 0 disables the per-attempt timer
        force_socket_timeout: Keep socket_timeout even if it exceeds the budget
    """

    retry_max_duration: Optional[int] = None
    retry_initial_delay: Optional[int] = None
    retry_backoff: Optional[int] = None
    retry_on_http_response: Optional[ResponsePredicate] = None
    retry_on_http_error: Optional[ErrorPredicate] = None
    socket_timeout: Optional[int] = None
    force_socket_timeout: Optional[bool] = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "RetryOptions":
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise RetryOptionsError(
                f"Unknown retry options: {', '.join(sorted(unknown))}",
                details={"unknown": sorted(unknown)},
            )
        return cls(**options)


@dataclass
class RetryPolicy:
    """
    Resolved retry policy for a single fetch.

    Only `current_delay` changes after creation: the engine multiplies it
    by `backoff_factor` after every unsuccessful round. A policy belongs to
    exactly one call and must not be shared.
    """

    start_time: float  # time.monotonic() seconds
    max_duration: float
    initial_delay: int
    current_delay: float
    backoff_factor: int
    socket_timeout: float
    force_socket_timeout: bool
    response_predicate: ResponsePredicate
    error_predicate: ErrorPredicate

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000

    def remaining_ms(self) -> float:
        """Budget left, never negative."""
        return max(0.0, self.max_duration - self.elapsed_ms())

    def apply_backoff(self) -> None:
        self.current_delay *= self.backoff_factor


RetryOptionsInput = Union[RetryOptions, Mapping[str, Any], Literal[False], None]


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def check_parameters(options: RetryOptions) -> None:
    """
    Validate caller-supplied retry options.

    Raises:
        RetryOptionsError: On the first malformed field
    """
    if options.retry_max_duration is not None and not (
        _is_integer(options.retry_max_duration) and options.retry_max_duration >= 0
    ):
        raise RetryOptionsError("`retry_max_duration` must not be a negative integer")
    if options.retry_initial_delay is not None and not (
        _is_integer(options.retry_initial_delay) and options.retry_initial_delay >= 0
    ):
        raise RetryOptionsError("`retry_initial_delay` must not be a negative integer")
    if options.retry_on_http_response is not None and not callable(options.retry_on_http_response):
        raise RetryOptionsError(
            f"'retry_on_http_response' must be a function: {options.retry_on_http_response}"
        )
    if options.retry_on_http_error is not None and not callable(options.retry_on_http_error):
        raise RetryOptionsError(
            f"'retry_on_http_error' must be a function: {options.retry_on_http_error}"
        )
    if options.retry_backoff is not None and not (
        _is_integer(options.retry_backoff) and options.retry_backoff >= 1
    ):
        raise RetryOptionsError("`retry_backoff` must be a positive integer >= 1")
    if options.socket_timeout is not None and not (
        _is_integer(options.socket_timeout) and options.socket_timeout >= 0
    ):
        raise RetryOptionsError("`socket_timeout` must not be a negative integer")


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


def resolve_policy(
    retry_options: RetryOptionsInput = None,
    settings: Optional[Settings] = None,
) -> Optional[RetryPolicy]:
    """
    Resolve the retry policy for one fetch.

    Args:
        retry_options: RetryOptions, an equivalent mapping, None for all
            defaults, or False to disable retries
        settings: Settings snapshot; read from the environment when omitted

    Returns:
        RetryPolicy, or None when retries are disabled

    Raises:
        RetryOptionsError: If any option is malformed
    """
    if retry_options is False:
        return None

    if retry_options is None:
        options = RetryOptions()
    elif isinstance(retry_options, RetryOptions):
        options = retry_options
    elif isinstance(retry_options, Mapping):
        options = RetryOptions.from_mapping(retry_options)
    else:
        raise RetryOptionsError(
            f"retry options must be RetryOptions, a mapping, None or False: {retry_options!r}"
        )

    check_parameters(options)
    settings = settings or get_settings()

    max_duration: float = _pick(options.retry_max_duration, settings.FETCH_RETRY_MAX_RETRY)

    if settings.ACTION_DEADLINE is not None:
        time_till_deadline = settings.ACTION_DEADLINE - time.time() * 1000
        if time_till_deadline < max_duration:
            logger.debug(
                "Clamping retry budget to external deadline",
                requested_ms=max_duration,
                time_till_deadline_ms=time_till_deadline,
            )
            max_duration = max(0.0, time_till_deadline)

    force_socket_timeout = bool(
        _pick(options.force_socket_timeout, settings.FETCH_RETRY_FORCE_TIMEOUT)
    )
    socket_timeout: float = _pick(options.socket_timeout, settings.FETCH_RETRY_SOCKET_TIMEOUT)
    if socket_timeout >= max_duration and not force_socket_timeout:
        # Half the budget, so at least one retry window remains
        socket_timeout = max_duration * 0.5
    elif force_socket_timeout:
        logger.info("Forced to use socket timeout", socket_timeout_ms=socket_timeout)

    initial_delay = int(_pick(options.retry_initial_delay, settings.FETCH_RETRY_INITIAL_WAIT))

    return RetryPolicy(
        start_time=time.monotonic(),
        max_duration=max_duration,
        initial_delay=initial_delay,
        current_delay=initial_delay,
        backoff_factor=int(_pick(options.retry_backoff, settings.FETCH_RETRY_BACKOFF)),
        socket_timeout=socket_timeout,
        force_socket_timeout=force_socket_timeout,
        response_predicate=options.retry_on_http_response or default_response_predicate,
        error_predicate=options.retry_on_http_error or default_error_predicate,
    )
