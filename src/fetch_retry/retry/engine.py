"""
Retry engine for a single logical HTTP request.

The engine drives one fetch through its attempts:

    resolve policy -> attempt (under socket timeout) -> decide
        -> wait and back off -> attempt ...

until a response is accepted, an error is not retried, or the time budget
runs out. Running out of time, whether by a socket timeout that is not
retried or by the budget being used up, ends in FetchTimeoutError.

Usage:
    async with HttpxTransport() as transport:
        engine = RetryEngine(transport)
        response = await engine.fetch("https://example.com", retry_options={"retry_max_duration": 5000})
"""

import asyncio
import random
from typing import Any, Optional

import httpx
import structlog

from fetch_retry.config import Settings, get_settings
from fetch_retry.exceptions import AttemptTimeoutError, FetchTimeoutError
from fetch_retry.monitoring.metrics import (
    fetch_attempts_total,
    fetch_duration_seconds,
    fetch_retries_total,
    fetch_timeouts_total,
)
from fetch_retry.retry.decision import should_retry
from fetch_retry.retry.metadata import RetryMetadata
from fetch_retry.retry.policy import RetryOptionsInput, RetryPolicy, resolve_policy
from fetch_retry.retry.timeout import attempt_timeout
from fetch_retry.transport import BaseTransport, HttpxTransport

logger = structlog.get_logger(__name__)

MAX_JITTER_MS = 99


def retry_delay(policy: RetryPolicy, jitter: bool = True) -> float:
    """
    Milliseconds to wait before the next attempt.

    Adds up to MAX_JITTER_MS of random jitter so that many callers failing
    at once do not retry in lockstep.
    """
    return policy.current_delay + (random.randint(0, MAX_JITTER_MS) if jitter else 0)


class RetryEngine:
    """
    Retry engine for HTTP requests.

    Holds no per-call state: every fetch resolves its own RetryPolicy, so
    one engine can serve any number of concurrent fetches.

    Attributes:
        transport: Transport that sends a single request per attempt
        settings: Fixed settings, or None to read the environment on each fetch
    """

    def __init__(self, transport: BaseTransport, settings: Optional[Settings] = None):
        self.transport = transport
        self.settings = settings

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        retry_options: RetryOptionsInput = None,
        **request_kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request, retrying per the resolved policy.

        A `timeout` in request_kwargs is the caller's own cancellation and
        switches off the engine's socket timeout.

        Args:
            url: Request URL
            method: HTTP method
            retry_options: RetryOptions, mapping, None for defaults, or
                False to send exactly once
            **request_kwargs: Passed to the transport (headers, json, ...)

        Returns:
            The accepted response. Any status code can be final; the
            response carries `extensions["socket_timeout"]` and
            `extensions["retry_metadata"]`.

        Raises:
            RetryOptionsError: Malformed retry options (nothing is sent)
            FetchTimeoutError: Out of time
            Exception: A transport error that was not retried, unchanged
        """
        settings = self.settings or get_settings()
        policy = resolve_policy(retry_options, settings)

        if policy is None:
            logger.debug("Retries disabled, sending once", url=url, method=method)
            return await self.transport.send(method, url, **request_kwargs)

        try:
            return await self._run(policy, url, method, request_kwargs, settings)
        finally:
            if settings.PROMETHEUS_ENABLED:
                fetch_duration_seconds.observe(policy.elapsed_ms() / 1000)

    async def _run(
        self,
        policy: RetryPolicy,
        url: str,
        method: str,
        request_kwargs: dict[str, Any],
        settings: Settings,
    ) -> httpx.Response:
        metrics = settings.PROMETHEUS_ENABLED
        socket_timeout = 0 if "timeout" in request_kwargs else policy.socket_timeout
        attempt = 0

        logger.debug(
            "Starting fetch",
            url=url,
            method=method,
            max_duration_ms=policy.max_duration,
            socket_timeout_ms=socket_timeout,
            initial_delay_ms=policy.initial_delay,
            backoff_factor=policy.backoff_factor,
        )

        while policy.remaining_ms() > 0:
            attempt += 1
            wait_time = retry_delay(policy)

            try:
                async with attempt_timeout(socket_timeout, url):
                    response = await self.transport.send(method, url, **request_kwargs)
            except Exception as error:
                timed_out = isinstance(error, AttemptTimeoutError)
                if metrics:
                    fetch_attempts_total.labels(outcome="timeout" if timed_out else "error").inc()

                if not await should_retry(policy, error, None, wait_time):
                    if timed_out:
                        if metrics:
                            fetch_timeouts_total.labels(cause="socket").inc()
                        logger.error("Socket timeout, giving up", url=url, attempt=attempt)
                        raise FetchTimeoutError(
                            url, details={"cause": "socket", "attempts": attempt}
                        ) from error
                    raise

                if metrics:
                    fetch_retries_total.labels(reason="error").inc()
                logger.warning(
                    "Retrying request",
                    url=url,
                    attempt=attempt,
                    wait_ms=wait_time,
                    error_type=type(error).__name__,
                    error=str(error),
                )
            else:
                if metrics:
                    fetch_attempts_total.labels(outcome="response").inc()
                response.extensions["socket_timeout"] = socket_timeout

                if not await should_retry(policy, None, response, wait_time):
                    response.extensions["retry_metadata"] = RetryMetadata(
                        total_attempts=attempt,
                        total_latency_ms=int(policy.elapsed_ms()),
                        socket_timeout=socket_timeout,
                        max_duration=policy.max_duration,
                    )
                    logger.debug(
                        "Fetch completed",
                        url=url,
                        status_code=response.status_code,
                        attempts=attempt,
                    )
                    return response

                if metrics:
                    fetch_retries_total.labels(reason="response").inc()
                logger.warning(
                    "Retrying request",
                    url=url,
                    attempt=attempt,
                    wait_ms=wait_time,
                    status_code=response.status_code,
                    reason_phrase=response.reason_phrase,
                )
                await response.aclose()

            if wait_time > 0:
                await asyncio.sleep(wait_time / 1000)
            policy.apply_backoff()

        if metrics:
            fetch_timeouts_total.labels(cause="budget").inc()
        logger.error(
            "Retry budget exhausted",
            url=url,
            attempts=attempt,
            max_duration_ms=policy.max_duration,
        )
        raise FetchTimeoutError(url, details={"cause": "budget", "attempts": attempt})


async def retrying_fetch(
    url: str,
    *,
    method: str = "GET",
    retry_options: RetryOptionsInput = None,
    transport: Optional[BaseTransport] = None,
    settings: Optional[Settings] = None,
    **request_kwargs: Any,
) -> httpx.Response:
    """
    Fetch `url` with retries, backoff and per-attempt timeouts.

    Without a transport, a temporary HttpxTransport is opened for this
    call and closed afterwards. See RetryEngine.fetch for the rest.
    """
    if transport is not None:
        engine = RetryEngine(transport, settings)
        return await engine.fetch(url, method=method, retry_options=retry_options, **request_kwargs)

    async with HttpxTransport() as owned_transport:
        engine = RetryEngine(owned_transport, settings)
        return await engine.fetch(url, method=method, retry_options=retry_options, **request_kwargs)
