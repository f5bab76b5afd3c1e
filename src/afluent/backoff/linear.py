r"""Linear backoff strategy."""

from __future__ import annotations

__all__ = ["LinearBackoff"]

from afluent.backoff.base import BaseBackoffStrategy, check_delays


class LinearBackoff(BaseBackoffStrategy):
    """Linear backoff strategy.

    Calculates delay as: base_delay * retry, with optional max_delay cap.

    Args:
        base_delay: The delay added by each retry, in seconds (default: 1.0).
        max_delay: Optional maximum delay cap in seconds.

    Example:
        ```pycon
        >>> from afluent.backoff import LinearBackoff
        >>> backoff = LinearBackoff(base_delay=1.0)
        >>> backoff.calculate(1), backoff.calculate(2), backoff.calculate(3)
        (1.0, 2.0, 3.0)
        >>> LinearBackoff(base_delay=2.0, max_delay=5.0).calculate(6)  # Would be 12.0
        5.0

        ```
    """

    def __init__(self, base_delay: float = 1.0, max_delay: float | None = None) -> None:
        check_delays(base_delay, max_delay)
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )

    def calculate(self, retry: int) -> float:
        delay = self.base_delay * retry
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
