r"""Lazy view over the HTTP exchange of a request.

A ``Response`` is created together with its ``Request``. The first
accessor call dispatches the request through its filters and retry
coordinator, buffers the body, then converts it into the requested
representation.
"""

from __future__ import annotations

__all__ = ["Response"]

import asyncio
import io
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from afluent.exceptions import ApiError, NoFormatterError
from afluent.formatters.base import DEFAULT_ENCODING
from afluent.utils.response import get_media_type, is_timeout_response

if TYPE_CHECKING:
    import httpx

    from afluent.request import Request

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class Response:
    r"""Response of a request, dispatched on first access.

    The request pipeline runs at most once per response, even when
    several accessors are awaited concurrently. Its outcome is memoised:
    once dispatched, every accessor reads the same buffered body, and a
    dispatch error is raised again by every later accessor call.

    If the request raises HTTP errors as exceptions, every accessor
    raises ``ApiError`` for a 4xx or 5xx status before reading the body.

    Args:
        request: The request which produces the response.
        message: The raw HTTP response if it is already known. In that
            case the request is not dispatched.
        http_error_as_exception: Optional override of the request
            setting which raises HTTP error statuses as ``ApiError``.

    Example:
        ```pycon
        >>> import asyncio
        >>> from afluent import FluentClient
        >>> async def main():  # doctest: +SKIP
        ...     async with FluentClient("https://api.example.com/") as client:
        ...         response = await client.get("ideas/14")
        ...         print(response.status)
        ...         idea = await response.as_model(dict)
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        request: Request,
        message: httpx.Response | None = None,
        *,
        http_error_as_exception: bool | None = None,
    ) -> None:
        self.request = request
        self._message = message
        self._http_error_as_exception = http_error_as_exception
        self._dispatch_task: asyncio.Future[Response] | None = None

    def __repr__(self) -> str:
        if self._message is None:
            return f"{self.__class__.__qualname__}({self.request!r}, pending)"
        return f"{self.__class__.__qualname__}({self.request!r}, status={self._message.status_code})"

    @property
    def is_dispatched(self) -> bool:
        """Whether the final result of the request is known."""
        return self._message is not None

    @property
    def message(self) -> httpx.Response:
        """The raw HTTP response.

        Raises:
            RuntimeError: If the request is not dispatched yet.
        """
        if self._message is None:
            msg = "The response is not available until the request is dispatched"
            raise RuntimeError(msg)
        return self._message

    @property
    def status(self) -> int:
        """The HTTP status code."""
        return self.message.status_code

    @property
    def headers(self) -> httpx.Headers:
        """The HTTP response headers."""
        return self.message.headers

    @property
    def is_success(self) -> bool:
        """Whether the status code is a 2xx success."""
        return self.message.is_success

    def _set_message(self, message: httpx.Response) -> None:
        self._message = message

    async def dispatch(self) -> Response:
        r"""Dispatch the request if it was not dispatched yet.

        Returns:
            The response itself.

        Raises:
            RetryExhaustedError: If the retry coordinator gave up.
            asyncio.CancelledError: If the caller cancelled the request.
        """
        if self._message is not None and self._dispatch_task is None:
            return self
        if self._dispatch_task is None:
            self._dispatch_task = asyncio.ensure_future(self.request._execute())
        await self._dispatch_task
        return self

    async def as_message(self) -> httpx.Response:
        r"""Get the raw HTTP response, with its body buffered.

        Raises:
            ApiError: If the status is an HTTP error and HTTP errors are
                raised as exceptions.
        """
        await self.dispatch()
        self._raise_for_status()
        return self.message

    async def as_model(self, type_: type[T] | Any = Any) -> T:
        r"""Deserialize the body into a model.

        The formatter is selected from the request formatters by the
        ``Content-Type`` of the response.

        Args:
            type_: The model type, e.g. a dataclass, ``dict`` or
                ``list[int]``. ``Any`` returns the decoded document.

        Returns:
            The deserialized model.

        Raises:
            ApiError: If the status is an HTTP error and HTTP errors are
                raised as exceptions. The body is not deserialized.
            NoFormatterError: If no formatter can read the body.
            pydantic.ValidationError: If a JSON body does not match
                the type.
        """
        return self._deserialize(await self.as_message(), type_)

    def _deserialize(self, message: httpx.Response, type_: Any) -> Any:
        # The status code is not checked here.
        media_type = get_media_type(message.headers)
        formatter = self.request.formatters.find_reader(media_type, type_)
        if formatter is None:
            raise NoFormatterError(
                media_type,
                type_,
                method=self.request.method,
                url=str(self.request.url),
            )
        logger.debug(f"Reading {media_type} response of {self.request.url} with {formatter!r}")
        return formatter.deserialize(message.content, type_, message.encoding or DEFAULT_ENCODING)

    async def as_list(self, type_: type[T] | Any = Any) -> list[T]:
        """Deserialize the body into a list of models."""
        return await self.as_model(list[type_])

    async def as_bytes(self) -> bytes:
        """Get the body bytes."""
        return (await self.as_message()).content

    async def as_text(self) -> str:
        """Get the body decoded with the response charset."""
        return (await self.as_message()).text

    async def as_stream(self) -> io.BytesIO:
        """Get a new binary stream over the buffered body."""
        return io.BytesIO(await self.as_bytes())

    async def as_json(self) -> Any:
        """Parse the body as a JSON document, whatever its
        ``Content-Type``."""
        return (await self.as_message()).json()

    def _raise_for_status(self) -> None:
        message = self.message
        enabled = self._http_error_as_exception
        if enabled is None:
            enabled = self.request.http_error_as_exception
        if not enabled or not (400 <= message.status_code < 600):
            return
        if is_timeout_response(message):
            msg = f"The API query timed out (status code {message.status_code})"
        else:
            msg = (
                f"The API query failed with status code {message.status_code}: "
                f"{message.reason_phrase}"
            )
        raise ApiError(self, msg)
