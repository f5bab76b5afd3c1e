r"""Define the exceptions raised by the request pipeline.

All the errors derive from ``HttpRequestError`` so callers can catch the
whole family at once, while the subclasses let them tell an upstream
error status apart from exhausted retries or a missing formatter.
Cancellation and transport failures are never wrapped.
"""

from __future__ import annotations

__all__ = ["ApiError", "HttpRequestError", "NoFormatterError", "RetryExhaustedError"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from afluent.response import Response


class HttpRequestError(Exception):
    """Base class of the errors raised while executing an HTTP request.

    Args:
        method: The HTTP method name (e.g., "GET", "POST").
        url: The requested URL.
        message: The error message.
        status_code: The HTTP status code of the response, if any.
        response: The response which caused the error, if any.
        cause: The exception which caused the error, if any.

    Example:
        ```pycon
        >>> from afluent.exceptions import HttpRequestError
        >>> exc = HttpRequestError(method="GET", url="https://example.com", message="failed")
        >>> exc.method, exc.url
        ('GET', 'https://example.com')
        >>> str(exc)
        'failed'

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
        response: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code
        self.response = response
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(method={self.method!r}, url={self.url!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class ApiError(HttpRequestError):
    """Raised when the upstream server answered with an error status.

    The error is raised lazily, when the response body is materialized
    and HTTP errors are configured to be raised as exceptions.

    Args:
        response: The response which caused the error. Its body must
            already be buffered.
        message: The error message.
    """

    def __init__(self, response: Response, message: str) -> None:
        super().__init__(
            method=response.request.method,
            url=str(response.request.url),
            message=message,
            status_code=response.message.status_code,
            response=response,
        )

    @property
    def headers(self) -> httpx.Headers:
        """The response headers."""
        return self.response.message.headers

    @property
    def content(self) -> bytes:
        """The raw response body."""
        return self.response.message.content

    @property
    def text(self) -> str:
        """The response body decoded with the response charset."""
        return self.response.message.text

    def as_model(self, type_: Any = Any) -> Any:
        r"""Deserialize the error body with the request formatters.

        Unlike the accessors of ``response``, the status code is not
        checked again.

        Args:
            type_: The model type of the error body.

        Returns:
            The deserialized error body.

        Raises:
            NoFormatterError: If no formatter can read the body.

        Example:
            ```pycon
            >>> import asyncio
            >>> from afluent import ApiError, FluentClient
            >>> async def main():  # doctest: +SKIP
            ...     async with FluentClient("https://api.example.com/") as client:
            ...         try:
            ...             await client.get("ideas/99").as_model(dict)
            ...         except ApiError as exc:
            ...             problem = exc.as_model(dict)
            ...
            >>> asyncio.run(main())  # doctest: +SKIP

            ```
        """
        return self.response._deserialize(self.response.message, type_)


class RetryExhaustedError(HttpRequestError):
    """Raised when the retry coordinator gave up on a request.

    Its ``response`` wraps the last attempt result and never raises
    ``ApiError``: its accessors read the last body whatever its status.

    Args:
        response: The response wrapping the last attempt result.
        attempts: The number of transport calls made, including the
            initial attempt.
        max_retries: The retry ceiling of the governing retry config.
        message: The error message.
    """

    def __init__(self, response: Response, attempts: int, max_retries: int, message: str) -> None:
        super().__init__(
            method=response.request.method,
            url=str(response.request.url),
            message=message,
            status_code=response.message.status_code,
            response=response,
        )
        self.attempts = attempts
        self.max_retries = max_retries

    @property
    def result(self) -> httpx.Response:
        """The result of the last attempt."""
        return self.response.message


class NoFormatterError(HttpRequestError):
    """Raised when no formatter can read or write a media type.

    This is a client-side configuration problem, so it is raised
    whatever the HTTP status of the response.

    Args:
        media_type: The media type which has no formatter.
        target_type: The type which had to be read or written.
        method: The HTTP method name, if known.
        url: The requested URL, if known.
    """

    def __init__(
        self,
        media_type: str | None,
        target_type: Any,
        method: str = "",
        url: str = "",
    ) -> None:
        type_name = getattr(target_type, "__name__", repr(target_type))
        super().__init__(
            method=method,
            url=url,
            message=f"No formatter is registered for media type {media_type!r} and type {type_name}",
        )
        self.media_type = media_type
        self.target_type = target_type
