r"""Fluent builder and execution pipeline of one HTTP request.

A ``Request`` is built with chained ``with_*`` methods, then dispatched
when it is awaited or when one of its accessors is awaited. Dispatch
runs the before-send filters, the retry coordinator (or the dispatcher
directly if there is none), buffers the body and runs the after-receive
filters. Filters run once per request, whatever the number of attempts.
"""

from __future__ import annotations

__all__ = ["Request"]

import base64
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from afluent.core.config import RequestOptions
from afluent.filters import FilterCollection
from afluent.formatters.form import FormUrlEncodedFormatter
from afluent.response import Response
from afluent.retry.config import RetryConfig, no_delay
from afluent.retry.coordinator import RetryCoordinator

if TYPE_CHECKING:
    import io
    from collections.abc import AsyncIterable, Awaitable, Callable, Generator
    from datetime import timedelta

    from afluent.cancellation import CancellationToken
    from afluent.filters import HttpFilter
    from afluent.formatters.collection import FormatterCollection

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class Request:
    r"""Description of one logical HTTP call.

    The request can be modified until it is dispatched. After the
    before-send filters ran, every builder method raises
    ``RuntimeError``.

    Args:
        method: The HTTP method name.
        url: The absolute URL.
        formatters: The formatters used to write the body and read the
            response.
        dispatcher: Async function which sends the request through the
            transport.
        filters: The filters of the request. The collection is owned by
            the request.
        request_coordinator: Optional retry coordinator. Without it,
            the request is dispatched once and transport errors
            propagate.
        headers: Optional initial headers.
        http_error_as_exception: Default of whether HTTP error statuses
            are raised as ``ApiError`` when the response is read.
        ignore_null_arguments: Default of whether ``None`` query
            arguments are dropped.
        timeout: Optional transport timeout in seconds.

    Example:
        ```pycon
        >>> from afluent import FluentClient
        >>> client = FluentClient("https://api.example.com/")
        >>> request = client.get("ideas").with_argument("page", 2).with_argument("tag", None)
        >>> str(request.url)
        'https://api.example.com/ideas?page=2'

        ```
    """

    def __init__(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        formatters: FormatterCollection,
        dispatcher: Callable[[Request], Awaitable[httpx.Response]],
        filters: FilterCollection | None = None,
        request_coordinator: RetryCoordinator | None = None,
        headers: httpx.Headers | Mapping[str, str] | None = None,
        http_error_as_exception: bool = True,
        ignore_null_arguments: bool = True,
        timeout: float | httpx.Timeout | None = None,
    ) -> None:
        self.method = method.upper()
        self.url = httpx.URL(url)
        self.headers = httpx.Headers(headers)
        self.content: Any = None
        self.formatters = formatters
        self.filters = filters if filters is not None else FilterCollection()
        self.request_coordinator = request_coordinator
        self.cancellation_token: CancellationToken | None = None
        self.options = RequestOptions()
        self.extensions: dict[str, Any] = {}
        if timeout is not None:
            self.extensions["timeout"] = httpx.Timeout(timeout).as_dict()

        self._dispatcher = dispatcher
        self._default_http_error_as_exception = http_error_as_exception
        self._default_ignore_null_arguments = ignore_null_arguments
        self._replayable = True
        self._dispatched = False
        self._message: httpx.Request | None = None
        self._response: Response | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self.method} {self.url})"

    def __await__(self) -> Generator[Any, None, Response]:
        return self.response.dispatch().__await__()

    @property
    def response(self) -> Response:
        """The response of the request. Reading it does not dispatch the
        request."""
        if self._response is None:
            self._response = Response(self)
        return self._response

    @property
    def is_dispatched(self) -> bool:
        """Whether dispatch has begun. The request is then read-only."""
        return self._dispatched

    @property
    def is_replayable(self) -> bool:
        """Whether the body can be sent more than once."""
        return self._replayable

    @property
    def http_error_as_exception(self) -> bool:
        """Whether reading the response raises ``ApiError`` for an HTTP
        error status."""
        if self.options.ignore_http_errors is not None:
            return not self.options.ignore_http_errors
        return self._default_http_error_as_exception

    @property
    def ignore_null_arguments(self) -> bool:
        if self.options.ignore_null_arguments is not None:
            return self.options.ignore_null_arguments
        return self._default_ignore_null_arguments

    def build_message(self) -> httpx.Request:
        r"""Build the ``httpx.Request`` sent by the transport.

        Once dispatch has begun, the same message is returned for every
        attempt, so a one-shot body stream is never silently replaced
        by an empty body.
        """
        if self._message is not None:
            return self._message
        message = httpx.Request(
            self.method,
            self.url,
            headers=self.headers,
            content=self.content,
            extensions=dict(self.extensions),
        )
        if self._dispatched:
            self._message = message
        return message

    def _check_mutable(self) -> None:
        if self._dispatched:
            msg = f"{self!r} was already dispatched and can no longer be modified"
            raise RuntimeError(msg)

    ##############
    #  Builders  #
    ##############

    def with_header(self, name: str, value: str) -> Request:
        """Add a header value. Existing values of the header are kept."""
        self._check_mutable()
        self.headers = httpx.Headers([*self.headers.multi_items(), (name, value)])
        return self

    def with_headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> Request:
        """Add several header values."""
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            self.with_header(name, value)
        return self

    def with_authentication(self, scheme: str, parameter: str) -> Request:
        """Set the ``Authorization`` header."""
        self._check_mutable()
        self.headers["Authorization"] = f"{scheme} {parameter}"
        return self

    def with_basic_authentication(self, username: str, password: str) -> Request:
        credentials = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return self.with_authentication("Basic", credentials)

    def with_bearer_authentication(self, token: str) -> Request:
        return self.with_authentication("Bearer", token)

    def with_argument(self, key: str, value: Any) -> Request:
        r"""Add a query string argument.

        A ``None`` value is dropped if null arguments are ignored,
        otherwise it is sent as an empty string.
        """
        self._check_mutable()
        if value is None:
            if self.ignore_null_arguments:
                return self
            value = ""
        self.url = self.url.copy_add_param(key, str(value))
        return self

    def with_arguments(self, arguments: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> Request:
        """Add several query string arguments. Blank keys are skipped."""
        if arguments is None:
            return self
        items = arguments.items() if isinstance(arguments, Mapping) else arguments
        for key, value in items:
            if key is None or not str(key).strip():
                continue
            self.with_argument(str(key), value)
        return self

    def with_body(self, model: Any, content_type: str | None = None) -> Request:
        r"""Set the body to a model serialized by the formatters.

        Args:
            model: The value to serialize.
            content_type: Optional media type of the body. If ``None``,
                the first formatter which can write the model is used.

        Raises:
            NoFormatterError: If no formatter can write the model.
        """
        self._check_mutable()
        formatter = self.formatters.get_writer(content_type, type(model))
        self.content = formatter.serialize(model)
        self._replayable = True
        self.headers["Content-Type"] = content_type or formatter.default_media_type
        return self

    def with_body_content(
        self,
        content: bytes | str | AsyncIterable[bytes],
        content_type: str | None = None,
    ) -> Request:
        r"""Set the raw body.

        A body given as an async generator can only be sent once.
        Sending it again, e.g. on a retry, raises
        ``httpx.StreamConsumed``.
        """
        self._check_mutable()
        if isinstance(content, str):
            content = content.encode()
        self._replayable = isinstance(content, (bytes, bytearray))
        self.content = bytes(content) if isinstance(content, bytearray) else content
        if content_type is not None:
            self.headers["Content-Type"] = content_type
        return self

    def with_form_body(self, fields: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> Request:
        """Set the body to a URL-encoded form."""
        self._check_mutable()
        formatter = FormUrlEncodedFormatter()
        self.content = formatter.serialize(fields)
        self._replayable = True
        self.headers["Content-Type"] = formatter.default_media_type
        return self

    def with_custom(self, callback: Callable[[Request], None]) -> Request:
        """Apply a custom change to the request."""
        self._check_mutable()
        callback(self)
        return self

    def with_timeout(self, timeout: float | httpx.Timeout) -> Request:
        """Set the transport timeout of each attempt."""
        self._check_mutable()
        self.extensions["timeout"] = httpx.Timeout(timeout).as_dict()
        return self

    def with_cancellation_token(self, token: CancellationToken | None) -> Request:
        self._check_mutable()
        self.cancellation_token = token
        return self

    def with_options(
        self,
        options: RequestOptions | None = None,
        *,
        ignore_http_errors: bool | None = None,
        ignore_null_arguments: bool | None = None,
    ) -> Request:
        r"""Override the client options for this request.

        ``None`` values keep the current option.
        """
        self._check_mutable()
        self.options = self.options.merge(options).merge(
            RequestOptions(
                ignore_http_errors=ignore_http_errors,
                ignore_null_arguments=ignore_null_arguments,
            )
        )
        return self

    def with_request_coordinator(
        self,
        coordinator: RetryCoordinator | RetryConfig | Iterable[RetryConfig | None] | None,
    ) -> Request:
        r"""Set the retry coordinator of this request.

        Args:
            coordinator: A coordinator, or retry configs used to create
                one. ``None`` disables retries.
        """
        self._check_mutable()
        if coordinator is not None and not isinstance(coordinator, RetryCoordinator):
            coordinator = RetryCoordinator(coordinator)
        self.request_coordinator = coordinator
        return self

    def with_retry(
        self,
        max_retries: int,
        should_retry: Callable[[httpx.Response], bool],
        get_delay: Callable[[int, httpx.Response], float | timedelta] = no_delay,
    ) -> Request:
        """Retry this request with a single retry config."""
        return self.with_request_coordinator(
            RetryConfig(max_retries=max_retries, should_retry=should_retry, get_delay=get_delay)
        )

    def with_filter(self, filter_: HttpFilter, remove_existing: bool = True) -> Request:
        r"""Add a filter to this request.

        Args:
            filter_: The filter to add.
            remove_existing: Whether to remove the first filter of the
                same type first.
        """
        self._check_mutable()
        if remove_existing:
            self.filters.remove(type(filter_))
        self.filters.add(filter_)
        return self

    def without_filter(self, filter_type: type[HttpFilter]) -> Request:
        """Remove the first filter of a given type from this request."""
        self._check_mutable()
        self.filters.remove(filter_type)
        return self

    ###############
    #  Accessors  #
    ###############

    async def as_message(self) -> httpx.Response:
        return await self.response.as_message()

    async def as_model(self, type_: type[T] | Any = Any) -> T:
        return await self.response.as_model(type_)

    async def as_list(self, type_: type[T] | Any = Any) -> list[T]:
        return await self.response.as_list(type_)

    async def as_bytes(self) -> bytes:
        return await self.response.as_bytes()

    async def as_text(self) -> str:
        return await self.response.as_text()

    async def as_stream(self) -> io.BytesIO:
        return await self.response.as_stream()

    async def as_json(self) -> Any:
        return await self.response.as_json()

    ###############
    #  Execution  #
    ###############

    async def _execute(self) -> Response:
        response = self.response
        self.filters.apply_before_send(self)
        self._dispatched = True
        logger.debug(f"Dispatching {self.method} request to {self.url}")

        if self.request_coordinator is not None:
            message = await self.request_coordinator.execute(self, self._dispatcher)
        else:
            message = await self._dispatcher(self)
        await message.aread()
        response._set_message(message)
        logger.debug(
            f"{self.method} request to {self.url} completed with status {message.status_code}"
        )

        self.filters.apply_after_receive(response, self.http_error_as_exception)
        return response
