"""
Retry metadata attached to responses.

Successful fetches carry a RetryMetadata instance in
`response.extensions["retry_metadata"]` so callers can see how the final
answer was reached.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryMetadata:
    """
    How a retried fetch reached its final response.

    Attributes:
        total_attempts: Number of transport attempts made (including the last)
        total_latency_ms: Time from policy creation to the final response (ms)
        socket_timeout: Effective per-attempt timeout (ms) after clamping
        max_duration: Effective retry budget (ms) after the deadline clamp
    """

    total_attempts: int
    total_latency_ms: int
    socket_timeout: float
    max_duration: float

    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")

        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")
