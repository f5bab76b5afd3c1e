r"""HTTP response helpers.

This module builds and recognizes the synthetic response which stands
for a transport-level timeout, so that retry predicates only ever see
response data, and extracts media types from headers.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MEDIA_TYPE",
    "TIMEOUT_EXTENSION",
    "create_timeout_response",
    "get_media_type",
    "is_timeout_response",
    "normalize_media_type",
]

import httpx

from afluent.core.config import TIMEOUT_STATUS_CODE

# Media type assumed when a response has no Content-Type header
DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Response extension which flags a synthetic timeout response
TIMEOUT_EXTENSION = "afluent.synthetic_timeout"


def create_timeout_response(message: httpx.Request) -> httpx.Response:
    r"""Create the synthetic response of a timed-out request.

    Args:
        message: The HTTP request which timed out.

    Returns:
        An empty response with status ``TIMEOUT_STATUS_CODE``. This
        response is internal and never comes from a server.

    Example:
        ```pycon
        >>> import httpx
        >>> from afluent.utils.response import create_timeout_response, is_timeout_response
        >>> response = create_timeout_response(httpx.Request("GET", "https://example.com"))
        >>> response.status_code
        591
        >>> is_timeout_response(response)
        True

        ```
    """
    return httpx.Response(
        TIMEOUT_STATUS_CODE,
        request=message,
        extensions={TIMEOUT_EXTENSION: True},
    )


def is_timeout_response(response: httpx.Response) -> bool:
    r"""Indicate whether a response is a synthetic timeout response."""
    return response.status_code == TIMEOUT_STATUS_CODE and bool(
        response.extensions.get(TIMEOUT_EXTENSION, False)
    )


def normalize_media_type(content_type: str | None) -> str | None:
    r"""Strip the parameters of a content type and lowercase it.

    Example:
        ```pycon
        >>> from afluent.utils.response import normalize_media_type
        >>> normalize_media_type("Application/JSON; charset=utf-8")
        'application/json'
        >>> normalize_media_type(None) is None
        True

        ```
    """
    if content_type is None:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type or None


def get_media_type(headers: httpx.Headers) -> str:
    r"""Return the media type declared by the Content-Type header.

    Args:
        headers: The message headers.

    Returns:
        The normalized media type, or ``DEFAULT_MEDIA_TYPE`` if the
        header is missing or empty.
    """
    return normalize_media_type(headers.get("content-type")) or DEFAULT_MEDIA_TYPE
