r"""Retry configuration records.

A ``RetryConfig`` tells the retry coordinator whether a result should be
retried, how many times, and how long to wait between attempts. It is
immutable, and its functions only receive the attempt result and the
attempt index.
"""

from __future__ import annotations

__all__ = ["RetryConfig", "no_delay", "retry_on_status"]

from dataclasses import dataclass
from datetime import timedelta
from functools import partial
from typing import TYPE_CHECKING

from afluent.core.config import DEFAULT_MAX_RETRIES, RETRY_STATUS_CODES
from afluent.core.validation import validate_max_retries, validate_retry_params
from afluent.utils.delay import calculate_delay

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    import httpx

    from afluent.backoff.base import BaseBackoffStrategy


def no_delay(attempt: int, response: httpx.Response) -> float:  # noqa: ARG001
    r"""Delay function which retries immediately."""
    return 0.0


def retry_on_status(
    status_codes: Iterable[int] = RETRY_STATUS_CODES,
) -> Callable[[httpx.Response], bool]:
    r"""Create a retry predicate matching a set of status codes.

    Args:
        status_codes: The status codes to retry. The default set
            includes the synthetic timeout status.

    Returns:
        A predicate which returns ``True`` for responses whose status
        code is in ``status_codes``.

    Example:
        ```pycon
        >>> import httpx
        >>> from afluent.retry import retry_on_status
        >>> should_retry = retry_on_status([503])
        >>> should_retry(httpx.Response(503)), should_retry(httpx.Response(200))
        (True, False)

        ```
    """
    codes = frozenset(status_codes)

    def should_retry(response: httpx.Response) -> bool:
        return response.status_code in codes

    return should_retry


@dataclass(frozen=True)
class RetryConfig:
    """Configuration of a request retry strategy.

    Attributes:
        max_retries: Maximum number of retries after the initial attempt.
            The initial attempt is never counted as a retry.
        should_retry: Function which indicates whether a result should be
            retried. Synthetic timeout results are passed like any other
            response.
        get_delay: Function which returns the delay before the next
            attempt, in seconds or as a ``timedelta``. It is passed the
            number of attempts already made (1 on the first retry) and
            the last result.

    Example:
        ```pycon
        >>> from afluent.retry import RetryConfig
        >>> config = RetryConfig(
        ...     max_retries=2,
        ...     should_retry=lambda response: response.status_code >= 500,
        ... )
        >>> config.max_retries
        2

        ```
    """

    max_retries: int
    should_retry: Callable[[httpx.Response], bool]
    get_delay: Callable[[int, httpx.Response], float | timedelta] = no_delay

    def __post_init__(self) -> None:
        validate_max_retries(self.max_retries)

    @classmethod
    def with_intervals(
        cls,
        should_retry: Callable[[httpx.Response], bool],
        *intervals: float | timedelta,
    ) -> RetryConfig:
        r"""Create a config which waits a fixed interval before each
        retry.

        Args:
            should_retry: Function which indicates whether a result
                should be retried.
            *intervals: The delay before each retry. The number of
                intervals is the maximum number of retries.

        Returns:
            The retry config.

        Example:
            ```pycon
            >>> from afluent.retry import RetryConfig, retry_on_status
            >>> config = RetryConfig.with_intervals(retry_on_status(), 0.5, 1.0, 5.0)
            >>> config.max_retries
            3
            >>> config.get_delay(2, None)
            1.0

            ```
        """
        delays = tuple(intervals)

        def get_delay(attempt: int, response: httpx.Response) -> float | timedelta:  # noqa: ARG001
            return delays[attempt - 1]

        return cls(max_retries=len(delays), should_retry=should_retry, get_delay=get_delay)

    @classmethod
    def with_backoff(
        cls,
        should_retry: Callable[[httpx.Response], bool] | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff: BaseBackoffStrategy | None = None,
        jitter_factor: float = 0.0,
        max_wait_time: float | None = None,
    ) -> RetryConfig:
        r"""Create a config which waits according to a backoff strategy.

        The ``Retry-After`` header of the last response takes precedence
        over the backoff strategy.

        Args:
            should_retry: Function which indicates whether a result
                should be retried. Defaults to ``retry_on_status()``.
            max_retries: Maximum number of retries. Must be >= 0.
            backoff: The backoff strategy. Defaults to
                ``ExponentialBackoff()``.
            jitter_factor: Factor for the random jitter added to each
                delay. Must be >= 0.
            max_wait_time: Optional cap in seconds of each delay.

        Returns:
            The retry config.

        Raises:
            ValueError: If a parameter is out of range.
        """
        validate_retry_params(
            max_retries=max_retries,
            jitter_factor=jitter_factor,
            max_wait_time=max_wait_time,
        )
        return cls(
            max_retries=max_retries,
            should_retry=should_retry if should_retry is not None else retry_on_status(),
            get_delay=partial(
                calculate_delay,
                backoff=backoff,
                jitter_factor=jitter_factor,
                max_wait_time=max_wait_time,
            ),
        )
