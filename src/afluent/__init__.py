r"""afluent - Asynchronous fluent HTTP client with a filter and retry
pipeline.

This package provides a fluent client built on top of httpx. A request
is assembled with chained builder methods, and dispatched lazily when it
is awaited or read. Dispatch runs an ordered chain of filters and a retry
coordinator around the transport call, and the response body is
buffered and deserialized through formatters selected by media type.

Key Features:
    - Fluent request builder (headers, query arguments, bodies, options)
    - Ordered filter chain observing the final request and response
    - Retry configs with custom predicates and delays, chained in order
    - Transport timeouts exposed to retry predicates as a synthetic
      response with status 591
    - Backoff strategies and Retry-After header support
    - Lazy response reading as models, lists, bytes, text or streams
    - Optional ``ApiError`` on HTTP error statuses

Example:
    ```pycon
    >>> import asyncio
    >>> from afluent import FluentClient
    >>> from afluent.retry import RetryConfig, retry_on_status
    >>> async def main():  # doctest: +SKIP
    ...     async with FluentClient("https://api.example.com/") as client:
    ...         client.set_request_coordinator(
    ...             RetryConfig.with_intervals(retry_on_status(), 0.5, 1.0, 5.0)
    ...         )
    ...         ideas = await client.get("ideas").with_argument("page", 2).as_list(dict)
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "ApiError",
    "CancellationToken",
    "ClientConfig",
    "FilterCollection",
    "FluentClient",
    "HttpFilter",
    "HttpRequestError",
    "NoFormatterError",
    "Request",
    "RequestOptions",
    "Response",
    "RetryConfig",
    "RetryCoordinator",
    "RetryExhaustedError",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from afluent.cancellation import CancellationToken
from afluent.client import FluentClient
from afluent.core.config import ClientConfig, RequestOptions
from afluent.exceptions import ApiError, HttpRequestError, NoFormatterError, RetryExhaustedError
from afluent.filters import FilterCollection, HttpFilter
from afluent.request import Request
from afluent.response import Response
from afluent.retry import RetryConfig, RetryCoordinator

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
