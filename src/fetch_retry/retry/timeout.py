"""
Per-attempt socket timeout.

Each attempt runs inside its own `asyncio.timeout` scope, which is disarmed
when the scope exits however the attempt ends. A timer from one attempt can
therefore never cancel a later one.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fetch_retry.exceptions import AttemptTimeoutError


@asynccontextmanager
async def attempt_timeout(timeout_ms: float, url: str) -> AsyncIterator[None]:
    """
    Cancel the enclosed attempt after `timeout_ms` milliseconds.

    A falsy timeout runs the attempt without a timer.

    Raises:
        AttemptTimeoutError: If this timer cancelled the attempt. A
            TimeoutError raised by the attempt itself passes through as-is.
    """
    if not timeout_ms:
        yield
        return

    timer = asyncio.timeout(timeout_ms / 1000)
    try:
        async with timer:
            yield
    except TimeoutError as exc:
        if timer.expired():
            raise AttemptTimeoutError(url, timeout_ms) from exc
        raise
