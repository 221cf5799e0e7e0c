"""Unit test fixtures (scripted transports).

Provides HttpxTransport instances wired to an httpx.MockTransport so the
retry engine can be exercised without a network.
"""

import httpx
import pytest

from fetch_retry.transport import HttpxTransport
from fixtures import ScriptedHandler


@pytest.fixture
def scripted_transport():
    """Factory: scripted_transport(*outcomes) -> (transport, handler)."""

    def factory(*outcomes):
        handler = ScriptedHandler(*outcomes)
        transport = HttpxTransport(transport=httpx.MockTransport(handler))
        return transport, handler

    return factory
