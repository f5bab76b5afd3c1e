r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    A backoff strategy determines how long to wait before retrying a
    failed request based on the retry index. Instances are callable with
    the ``(attempt, response)`` signature of ``RetryConfig.get_delay``,
    so they can be used as delay functions directly.
    """

    def __call__(self, attempt: int, response: httpx.Response | None = None) -> float:  # noqa: ARG002
        return self.calculate(attempt)

    @abstractmethod
    def calculate(self, retry: int) -> float:
        """Calculate the backoff delay for a given retry.

        Args:
            retry: The retry index (1-indexed), which is also the number
                of attempts already made. For example, retry=1 is the
                first retry, retry=2 is the second retry, etc.

        Returns:
            The calculated delay in seconds before the next attempt.
        """


def check_delays(base_delay: float, max_delay: float | None) -> None:
    r"""Check the delay parameters shared by the growing strategies.

    Raises:
        ValueError: If base_delay is negative or max_delay is not positive.
    """
    if base_delay < 0:
        msg = f"base_delay must be non-negative, got {base_delay}"
        raise ValueError(msg)
    if max_delay is not None and max_delay <= 0:
        msg = f"max_delay must be positive if specified, got {max_delay}"
        raise ValueError(msg)
