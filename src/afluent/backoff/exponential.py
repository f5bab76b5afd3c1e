r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from afluent.backoff.base import BaseBackoffStrategy, check_delays


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: base_delay * (2 ** (retry - 1)), with optional
    max_delay cap.

    This is the default backoff strategy of ``RetryConfig.with_backoff``
    and works well for most scenarios where you want progressively longer
    delays between retries.

    Args:
        base_delay: The delay before the first retry (default: 0.3).
        max_delay: Optional maximum delay cap in seconds. If specified,
            delays will not exceed this value.

    Example:
        ```pycon
        >>> from afluent.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=0.3)
        >>> backoff.calculate(1)  # First retry
        0.3
        >>> backoff.calculate(2)  # Second retry
        0.6
        >>> backoff.calculate(3)  # Third retry
        1.2
        >>> backoff = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
        >>> backoff.calculate(11)  # Would be 1024.0, but capped
        5.0

        ```
    """

    def __init__(self, base_delay: float = 0.3, max_delay: float | None = None) -> None:
        check_delays(base_delay, max_delay)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )

    def calculate(self, retry: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            retry: The retry index (1-indexed).

        Returns:
            The calculated delay: base_delay * (2 ** (retry - 1)),
            capped at max_delay if set.
        """
        delay = self.base_delay * (2 ** max(retry - 1, 0))
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
