r"""Callback data structures for retry observability.

The retry coordinator can notify user callbacks before each retry delay
and when it gives up. Callbacks observe every attempt, unlike filters
which only see the final request and response.

Example:
    ```pycon
    >>> from afluent.callbacks import RetryInfo
    >>> def log_retry(info: RetryInfo) -> None:
    ...     print(f"{info.method} {info.url}: retry {info.attempt}/{info.max_retries}")
    ...
    >>> log_retry(
    ...     RetryInfo(
    ...         url="https://example.com",
    ...         method="GET",
    ...         attempt=1,
    ...         max_retries=3,
    ...         wait_time=0.3,
    ...         status_code=503,
    ...     )
    ... )
    GET https://example.com: retry 1/3

    ```
"""

from __future__ import annotations

__all__ = ["FailureInfo", "RetryInfo"]

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryInfo:
    """Information passed to the on_retry callback.

    Attributes:
        url: The URL being requested.
        method: The HTTP method (e.g., "GET", "POST").
        attempt: The number of attempts already made (1 before the first
            retry).
        max_retries: The retry ceiling of the governing retry config.
        wait_time: The delay in seconds before the next attempt.
        status_code: The status code of the result which triggered the
            retry.
        timed_out: Whether that result is a synthetic timeout.
    """

    url: str
    method: str
    attempt: int
    max_retries: int
    wait_time: float
    status_code: int
    timed_out: bool = False


@dataclass(frozen=True)
class FailureInfo:
    """Information passed to the on_failure callback.

    Attributes:
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        attempt: The number of attempts made.
        max_retries: The retry ceiling of the governing retry config.
        error: The error about to be raised.
        status_code: The status code of the last result.
        total_time: Total time spent on all attempts including delays (seconds).
    """

    url: str
    method: str
    attempt: int
    max_retries: int
    error: Exception
    status_code: int
    total_time: float
