r"""Utility functions of the request pipeline.

This package provides helpers for retry delays, ``Retry-After`` header
parsing, synthetic timeout responses, media types and structured logging.
"""

from __future__ import annotations

__all__ = [
    "calculate_delay",
    "create_timeout_response",
    "get_media_type",
    "get_retry_after",
    "is_timeout_response",
    "log_structured",
    "normalize_media_type",
    "parse_retry_after",
]

from afluent.utils.delay import calculate_delay
from afluent.utils.response import (
    create_timeout_response,
    get_media_type,
    is_timeout_response,
    normalize_media_type,
)
from afluent.utils.retry_after import get_retry_after, parse_retry_after
from afluent.utils.structured_logging import log_structured
