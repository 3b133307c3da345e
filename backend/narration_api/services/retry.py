from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay: float = 0.0


class RetryPolicy(Protocol):
    max_attempts: int

    def decide(self, attempt: int, error: BaseException) -> RetryDecision:
        """Decide what to do after ``attempt`` (1-based) failed with ``error``."""
        ...


class FixedRetryPolicy:
    """Retry every error the same way, with a constant delay, up to ``max_attempts`` calls."""

    def __init__(self, max_attempts: int = 2, delay: float = 1.0) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.delay = delay

    def decide(self, attempt: int, error: BaseException) -> RetryDecision:
        if attempt < self.max_attempts:
            return RetryDecision(retry=True, delay=self.delay)
        return RetryDecision(retry=False)


__all__ = ["FixedRetryPolicy", "RetryDecision", "RetryPolicy"]
