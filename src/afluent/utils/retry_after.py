r"""Retry-After header parsing utilities.

The ``Retry-After`` header (RFC 9110) holds either a number of seconds
or an HTTP-date after which the client may retry.
"""

from __future__ import annotations

__all__ = ["get_retry_after", "parse_retry_after"]

import logging
from contextlib import suppress
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

logger: logging.Logger = logging.getLogger(__name__)


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """Parse a Retry-After header value into a number of seconds.

    Args:
        value: The header value, or ``None`` if the header is absent.
        now: The reference time for HTTP-date values. Defaults to the
            current UTC time.

    Returns:
        The number of seconds to wait, or ``None`` if the value is
        absent or cannot be parsed. Dates in the past and negative
        numbers are clamped to 0.0.

    Example:
        ```pycon
        >>> from datetime import datetime, timezone
        >>> from afluent.utils.retry_after import parse_retry_after
        >>> parse_retry_after("120")
        120.0
        >>> parse_retry_after(
        ...     "Wed, 21 Oct 2015 07:28:30 GMT",
        ...     now=datetime(2015, 10, 21, 7, 28, tzinfo=timezone.utc),
        ... )
        30.0
        >>> parse_retry_after("soon") is None
        True

        ```
    """
    if value is None:
        return None
    value = value.strip()

    with suppress(ValueError):
        return max(0.0, float(value))

    try:
        retry_date = parsedate_to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Failed to parse Retry-After header: {value!r}")
        return None
    if retry_date.tzinfo is None:
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    now = now if now is not None else datetime.now(timezone.utc)
    return max(0.0, (retry_date - now).total_seconds())


def get_retry_after(response: httpx.Response | None) -> float | None:
    """Return the Retry-After delay of a response, if any.

    Args:
        response: The HTTP response, or ``None``.

    Returns:
        The number of seconds to wait, or ``None``.
    """
    if response is None:
        return None
    return parse_retry_after(response.headers.get("Retry-After"))
