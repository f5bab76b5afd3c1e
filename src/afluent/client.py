r"""Asynchronous fluent HTTP client.

This module provides the ``FluentClient`` class, which creates
``Request`` objects sharing the client base URL, default headers,
filters, formatters and retry coordinator, and dispatches them through
an ``httpx.AsyncClient``.
"""

from __future__ import annotations

__all__ = ["DEFAULT_USER_AGENT", "FluentClient"]

import base64
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any

import httpx

from afluent.core.config import DEFAULT_TIMEOUT, ClientConfig
from afluent.core.validation import validate_timeout
from afluent.filters import FilterCollection
from afluent.formatters.collection import FormatterCollection
from afluent.request import Request
from afluent.retry.config import RetryConfig, no_delay
from afluent.retry.coordinator import RetryCoordinator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import timedelta
    from types import TracebackType
    from typing import Self

logger: logging.Logger = logging.getLogger(__name__)

try:
    DEFAULT_USER_AGENT = f"afluent/{version('afluent')}"
except PackageNotFoundError:  # pragma: no cover
    DEFAULT_USER_AGENT = "afluent"


class FluentClient:
    r"""Asynchronous client which builds and dispatches fluent requests.

    The client owns the underlying ``httpx.AsyncClient`` unless one is
    injected: it is created when entering the async context manager and
    closed when exiting it. Requests are dispatched when awaited, so they
    must be awaited inside the context.

    Args:
        base_url: Optional base URL which relative resources are joined
            to.
        config: Optional ClientConfig instance. If ``None``, a default
            ClientConfig is used.
        transport: Optional transport of the created
            ``httpx.AsyncClient``, e.g. ``httpx.MockTransport``.
        http_client: Optional ``httpx.AsyncClient`` to use. It is not
            closed by this client, and the client can be used without
            entering the async context manager.
        timeout: Maximum seconds to wait for server responses. Must be > 0.

    Example:
        ```pycon
        >>> import asyncio
        >>> from afluent import FluentClient
        >>> async def main():  # doctest: +SKIP
        ...     async with FluentClient("https://api.example.com/") as client:
        ...         idea = await client.get("ideas/14").as_model(dict)
        ...         ideas = await client.get("ideas").with_argument("page", 2).as_list(dict)
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        base_url: httpx.URL | str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self.base_url = httpx.URL(base_url) if base_url is not None else None
        self.config = config if config is not None else ClientConfig()
        self.timeout = timeout
        self.transport = transport

        self.filters = FilterCollection()
        self.formatters = FormatterCollection.default()
        self.headers = httpx.Headers({"User-Agent": self.config.user_agent or DEFAULT_USER_AGENT})
        self.request_coordinator: RetryCoordinator | None = None
        if self.config.retry:
            self.set_request_coordinator(self.config.retry)

        self._client = http_client
        self._owns_client = http_client is None
        self._entered = False

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_url={self.base_url!r})"

    async def __aenter__(self) -> Self:
        """Enter the async context manager and create the underlying
        httpx client.

        Returns:
            The FluentClient instance for making requests.
        """
        if self._owns_client:
            self._client = httpx.AsyncClient(transport=self.transport, timeout=self.timeout)
        self._entered = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the async context manager and close the underlying httpx
        client if it was created by this client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        self._entered = False

    @property
    def http_client(self) -> httpx.AsyncClient:
        """The underlying ``httpx.AsyncClient``.

        Raises:
            RuntimeError: If the client owns its httpx client and is used
                outside of an async context manager.
        """
        if self._client is None or (self._owns_client and not self._entered):
            msg = "FluentClient must be used within an async context manager (async with statement)"
            raise RuntimeError(msg)
        return self._client

    #############
    #  Options  #
    #############

    def set_authentication(self, scheme: str, parameter: str) -> FluentClient:
        """Set the ``Authorization`` header of every request."""
        self.headers["Authorization"] = f"{scheme} {parameter}"
        return self

    def set_basic_authentication(self, username: str, password: str) -> FluentClient:
        credentials = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return self.set_authentication("Basic", credentials)

    def set_bearer_authentication(self, token: str) -> FluentClient:
        return self.set_authentication("Bearer", token)

    def set_user_agent(self, user_agent: str) -> FluentClient:
        self.headers["User-Agent"] = user_agent
        return self

    def set_header(self, name: str, value: str) -> FluentClient:
        """Set a default header of every request, replacing any previous
        value."""
        self.headers[name] = value
        return self

    def set_http_error_as_exception(self, enabled: bool) -> FluentClient:
        r"""Set whether reading a response with an HTTP error status
        raises ``ApiError``.

        Requests can override it with
        ``Request.with_options(ignore_http_errors=...)``.
        """
        self.config = self.config.merge(http_error_as_exception=enabled)
        return self

    def set_request_coordinator(
        self,
        coordinator: RetryCoordinator | RetryConfig | Iterable[RetryConfig | None] | None,
    ) -> FluentClient:
        r"""Set the retry coordinator shared by the requests.

        Args:
            coordinator: A coordinator, or retry configs used to create
                one with the config callbacks. ``None`` disables
                retries.
        """
        if coordinator is not None and not isinstance(coordinator, RetryCoordinator):
            coordinator = RetryCoordinator(
                coordinator,
                on_retry=self.config.on_retry,
                on_failure=self.config.on_failure,
            )
        self.request_coordinator = coordinator
        return self

    def set_retry(
        self,
        max_retries: int,
        should_retry: Callable[[httpx.Response], bool],
        get_delay: Callable[[int, httpx.Response], float | timedelta] = no_delay,
    ) -> FluentClient:
        """Retry the requests with a single retry config."""
        return self.set_request_coordinator(
            RetryConfig(max_retries=max_retries, should_retry=should_retry, get_delay=get_delay)
        )

    ##############
    #  Requests  #
    ##############

    def resolve_url(self, resource: httpx.URL | str) -> httpx.URL:
        """Join a resource to the base URL. Absolute URLs are kept."""
        if self.base_url is None:
            return httpx.URL(resource)
        return self.base_url.join(resource)

    def send(self, method: str, resource: httpx.URL | str = "") -> Request:
        r"""Create a request. It is dispatched when awaited.

        Args:
            method: The HTTP method name.
            resource: The URL, relative to the base URL if any.

        Returns:
            The request, which can be customized with its builder
            methods.
        """
        request = Request(
            method,
            self.resolve_url(resource),
            formatters=self.formatters,
            dispatcher=self._dispatch,
            filters=self.filters.copy(),
            request_coordinator=self.request_coordinator,
            headers=self.headers,
            timeout=self.timeout,
            http_error_as_exception=self.config.http_error_as_exception,
            ignore_null_arguments=self.config.ignore_null_arguments,
        )
        logger.debug(f"Created {request!r}")
        return request

    def get(self, resource: httpx.URL | str = "") -> Request:
        return self.send("GET", resource)

    def post(self, resource: httpx.URL | str = "", body: Any = None) -> Request:
        request = self.send("POST", resource)
        return request if body is None else request.with_body(body)

    def put(self, resource: httpx.URL | str = "", body: Any = None) -> Request:
        request = self.send("PUT", resource)
        return request if body is None else request.with_body(body)

    def patch(self, resource: httpx.URL | str = "", body: Any = None) -> Request:
        request = self.send("PATCH", resource)
        return request if body is None else request.with_body(body)

    def delete(self, resource: httpx.URL | str = "") -> Request:
        return self.send("DELETE", resource)

    def head(self, resource: httpx.URL | str = "") -> Request:
        return self.send("HEAD", resource)

    def options(self, resource: httpx.URL | str = "") -> Request:
        return self.send("OPTIONS", resource)

    async def _dispatch(self, request: Request) -> httpx.Response:
        client = self.http_client
        message = request.build_message()
        if request.cancellation_token is None:
            return await client.send(message)
        return await request.cancellation_token.run(client.send(message))
