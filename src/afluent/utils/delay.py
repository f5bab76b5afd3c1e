r"""Retry delay calculation utilities.

This module computes the delay before a retry from a backoff strategy,
the ``Retry-After`` header of the last response, an optional cap and
optional jitter.
"""

from __future__ import annotations

__all__ = ["calculate_delay"]

import logging
import random
from typing import TYPE_CHECKING

from afluent.backoff.exponential import ExponentialBackoff
from afluent.utils.retry_after import get_retry_after

if TYPE_CHECKING:
    import httpx

    from afluent.backoff.base import BaseBackoffStrategy

logger: logging.Logger = logging.getLogger(__name__)


def calculate_delay(
    attempt: int,
    response: httpx.Response | None,
    backoff: BaseBackoffStrategy | None = None,
    jitter_factor: float = 0.0,
    max_wait_time: float | None = None,
) -> float:
    """Calculate the delay before the next retry.

    The delay is calculated as follows:
    1. Determine the base delay:
       - If the response has a parsable Retry-After header: use it
       - Otherwise: use ``backoff.calculate(attempt)``
    2. Apply the max_wait_time cap (if set)
    3. Add jitter (if jitter_factor > 0):
       ``random.uniform(0, jitter_factor) * delay``

    Args:
        attempt: The number of attempts already made (1 on the first
            retry).
        response: The last HTTP response, used for its Retry-After
            header.
        backoff: The backoff strategy. Defaults to ``ExponentialBackoff()``.
        jitter_factor: Factor for the random jitter added to the delay.
            Set to 0 to disable jitter.
        max_wait_time: Optional cap in seconds applied before jitter.

    Returns:
        The delay in seconds, including any jitter.

    Example:
        ```pycon
        >>> from afluent.utils.delay import calculate_delay
        >>> calculate_delay(attempt=1, response=None)
        0.3
        >>> calculate_delay(attempt=3, response=None)
        1.2
        >>> calculate_delay(attempt=3, response=None, max_wait_time=1.0)
        1.0

        ```
    """
    delay = get_retry_after(response)
    if delay is not None:
        logger.debug(f"Using Retry-After header value: {delay:.2f}s")
    else:
        if backoff is None:
            backoff = ExponentialBackoff()
        delay = backoff.calculate(attempt)

    if max_wait_time is not None and delay > max_wait_time:
        logger.debug(f"Capping delay from {delay:.2f}s to {max_wait_time:.2f}s")
        delay = max_wait_time

    if jitter_factor > 0:
        delay += random.uniform(0, jitter_factor) * delay  # noqa: S311
    return delay
