"""Custom Prometheus metrics for fetch-retry.

These metrics live in the default registry and are exposed by whatever
/metrics endpoint the host application serves. Alert rules worth setting:
- fetch_retries_total (high retry rate indicates an unstable upstream)
- fetch_timeouts_total (budget exhaustion means callers saw failures)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

fetch_attempts_total = Counter(
    "fetch_attempts_total",
    "Total transport attempts by outcome",
    ["outcome"],
)
"""
Transport attempts counter.

Labels:
- outcome: response (transport returned), error (transport raised), timeout (socket timer fired)
"""

fetch_retries_total = Counter(
    "fetch_retries_total",
    "Total retries scheduled by trigger",
    ["reason"],
)
"""
Retries counter.

Labels:
- reason: response (retryable status), error (retryable transport error or timeout)
"""

# === Timeout Metrics ===

fetch_timeouts_total = Counter(
    "fetch_timeouts_total",
    "Total fetches that failed with a network timeout",
    ["cause"],
)
"""
Terminal network timeouts.

Labels:
- cause: socket (per-attempt timer, not retried), budget (max duration used up)
"""

# === Latency Metrics ===

fetch_duration_seconds = Histogram(
    "fetch_duration_seconds",
    "Wall-clock duration of a complete retried fetch",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
)
