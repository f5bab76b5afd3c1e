from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from afluent import FluentClient, Request
from afluent.formatters import FormatterCollection

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Iterable

URL = "https://api.example.com/ideas"


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing callbacks."""
    return Mock()


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    """Create a factory of real httpx.Response objects bound to a
    request."""

    def _make(status_code: int = 200, **kwargs: Any) -> httpx.Response:
        return httpx.Response(status_code, request=httpx.Request("GET", URL), **kwargs)

    return _make


@pytest.fixture
def make_dispatcher() -> Callable[..., AsyncMock]:
    """Create a factory of dispatchers returning a sequence of results.

    Each item is either an ``httpx.Response`` or an exception raised by
    the call.
    """

    def _make(results: Iterable[httpx.Response | BaseException]) -> AsyncMock:
        return AsyncMock(side_effect=list(results))

    return _make


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Create a factory of requests dispatched by a given dispatcher."""

    def _make(dispatcher: Any, method: str = "GET", url: str = URL, **kwargs: Any) -> Request:
        return Request(
            method,
            url,
            formatters=FormatterCollection.default(),
            dispatcher=dispatcher,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_client() -> Callable[..., FluentClient]:
    """Create a factory of clients whose transport is an
    ``httpx.MockTransport`` calling ``handler``."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any
    ) -> FluentClient:
        return FluentClient(
            "https://api.example.com/", transport=httpx.MockTransport(handler), **kwargs
        )

    return _make
