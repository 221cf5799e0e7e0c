"""Prometheus instrumentation for retried fetches."""

from fetch_retry.monitoring.metrics import (
    fetch_attempts_total,
    fetch_duration_seconds,
    fetch_retries_total,
    fetch_timeouts_total,
)

__all__ = [
    "fetch_attempts_total",
    "fetch_retries_total",
    "fetch_timeouts_total",
    "fetch_duration_seconds",
]
