"""Integration test fixtures (local HTTP server).

Socket timeouts need a server whose response timing we control, which a
mock transport cannot give. This starts a tiny asyncio HTTP/1.1 server on
127.0.0.1 that answers each request according to a script.
"""

import asyncio
from http import HTTPStatus

import pytest_asyncio


class ScriptedServer:
    """
    Answers the n-th request with script[n] = (status, delay_seconds).

    The last entry repeats once the script runs out.
    """

    def __init__(self):
        self.script: list[tuple[int, float]] = [(200, 0)]
        self.requests = 0
        self._server: asyncio.Server | None = None
        self._handlers: set[asyncio.Task] = set()

    @property
    def url(self) -> str:
        host, port = self._server.sockets[0].getsockname()[:2]
        return f"http://{host}:{port}/"

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def stop(self) -> None:
        for task in self._handlers:
            task.cancel()
        self._server.close()
        await self._server.wait_closed()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        self._handlers.add(task)
        try:
            await reader.readuntil(b"\r\n\r\n")
            status, delay = self.script[min(self.requests, len(self.script) - 1)]
            self.requests += 1
            if delay:
                await asyncio.sleep(delay)

            phrase = HTTPStatus(status).phrase
            body = f"{phrase}\n".encode()
            writer.write(
                (
                    f"HTTP/1.1 {status} {phrase}\r\n"
                    "Content-Type: text/plain\r\n"
                    f"Content-Length: {len(body)}\r\n"
                    "Connection: close\r\n\r\n"
                ).encode()
                + body
            )
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError):
            pass  # Client gave up on this request
        finally:
            writer.close()
            self._handlers.discard(task)


@pytest_asyncio.fixture
async def http_server():
    """Running ScriptedServer; set `http_server.script` before fetching."""
    server = ScriptedServer()
    await server.start()
    yield server
    await server.stop()
