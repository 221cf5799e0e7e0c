"""
Test helpers for fetch-retry.

ScriptedHandler is an httpx.MockTransport handler that replays a fixed
script of outcomes, so retry behavior can be tested without a network:
- an int: respond with that status code
- an exception instance: raise it from the transport
- Slow(seconds, status): respond after a delay (for socket timeouts)
"""

import asyncio
from dataclasses import dataclass

import httpx


@dataclass
class Slow:
    """Respond with `status` after `seconds`."""

    seconds: float
    status: int = 200


class ScriptedHandler:
    """Replays outcomes in order; the last outcome repeats once the script runs out."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        index = min(len(self.requests), len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        self.requests.append(request)

        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, Slow):
            await asyncio.sleep(outcome.seconds)
            return httpx.Response(outcome.status, json={"slow": True})
        return httpx.Response(outcome, json={"ok": outcome < 400})
