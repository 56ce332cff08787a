"""Bounded retry budget shared by the service and readiness poll loops.

Both loops have the same shape:

    Idle -> Polling -> Satisfied
                    -> Escalated -> Polling
                    -> GaveUp

Escalation and giving up are decided by attempt count, never by wall clock,
so a slower poll interval delays escalation proportionally.
"""

from dataclasses import dataclass

from maintctl.config.models import PollingConfig


@dataclass
class RetryBudget:
    """Attempt counter with soft (escalate) and hard (give up) limits."""

    soft_limit: int
    hard_limit: int
    poll_interval: float
    attempt: int = 0

    def __post_init__(self) -> None:
        if self.hard_limit < 1:
            raise ValueError("hard_limit must be at least 1")
        if self.soft_limit >= self.hard_limit:
            raise ValueError(
                f"soft_limit ({self.soft_limit}) must be below "
                f"hard_limit ({self.hard_limit})"
            )
        if self.poll_interval < 0:
            raise ValueError("poll_interval must not be negative")

    @classmethod
    def from_config(cls, config: PollingConfig) -> "RetryBudget":
        """Derive iteration bounds from a duration-based polling policy."""
        return cls(
            soft_limit=config.soft_limit,
            hard_limit=config.hard_limit,
            poll_interval=config.poll_interval_seconds,
        )

    def reset(self) -> None:
        self.attempt = 0

    def next_attempt(self) -> int:
        """Count one more poll and return its 1-based number."""
        self.attempt += 1
        return self.attempt

    @property
    def escalated(self) -> bool:
        """True once the soft limit has been reached."""
        return self.attempt >= self.soft_limit

    @property
    def exhausted(self) -> bool:
        """True once the hard limit has been reached."""
        return self.attempt >= self.hard_limit

    @property
    def max_wait_seconds(self) -> float:
        """Total time spent sleeping if every attempt is used.

        One interval less than the configured duration, since no sleep
        follows the last probe.
        """
        return (self.hard_limit - 1) * self.poll_interval
