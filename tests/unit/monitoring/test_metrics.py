"""
Unit tests for Prometheus instrumentation of the retry engine.
"""

import httpx
import pytest
from prometheus_client import REGISTRY

from fetch_retry.exceptions import FetchTimeoutError
from fetch_retry.retry.engine import RetryEngine

URL = "https://example.com/metrics-test"


def sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_attempts_and_retries_are_counted(scripted_transport, test_settings):
    test_settings.PROMETHEUS_ENABLED = True
    transport, _ = scripted_transport(503, httpx.ConnectError("refused"), 200)
    engine = RetryEngine(transport, test_settings)

    responses_before = sample("fetch_attempts_total", outcome="response")
    errors_before = sample("fetch_attempts_total", outcome="error")
    retry_response_before = sample("fetch_retries_total", reason="response")
    retry_error_before = sample("fetch_retries_total", reason="error")
    durations_before = sample("fetch_duration_seconds_count")

    await engine.fetch(URL, retry_options={"retry_initial_delay": 10})

    assert sample("fetch_attempts_total", outcome="response") - responses_before == 2
    assert sample("fetch_attempts_total", outcome="error") - errors_before == 1
    assert sample("fetch_retries_total", reason="response") - retry_response_before == 1
    assert sample("fetch_retries_total", reason="error") - retry_error_before == 1
    assert sample("fetch_duration_seconds_count") - durations_before == 1


@pytest.mark.asyncio
async def test_budget_timeout_is_counted(scripted_transport, test_settings):
    test_settings.PROMETHEUS_ENABLED = True
    transport, _ = scripted_transport(200)
    engine = RetryEngine(transport, test_settings)

    before = sample("fetch_timeouts_total", cause="budget")

    with pytest.raises(FetchTimeoutError):
        await engine.fetch(URL, retry_options={"retry_max_duration": 0})

    assert sample("fetch_timeouts_total", cause="budget") - before == 1


@pytest.mark.asyncio
async def test_nothing_recorded_when_disabled(scripted_transport, test_settings):
    transport, _ = scripted_transport(200)
    engine = RetryEngine(transport, test_settings)

    before = sample("fetch_attempts_total", outcome="response")

    await engine.fetch(URL)

    assert sample("fetch_attempts_total", outcome="response") == before
