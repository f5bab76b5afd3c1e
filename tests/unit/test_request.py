r"""Unit tests for the fluent request builder and its pipeline."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import httpx
import pytest

from afluent import (
    CancellationToken,
    FilterCollection,
    HttpFilter,
    NoFormatterError,
    RequestOptions,
    RetryConfig,
    RetryCoordinator,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from afluent import Request, Response


class HeaderFilter(HttpFilter):
    def __init__(self, value: str = "1") -> None:
        self.value = value

    def on_request(self, request: Request) -> None:
        request.with_header("X-Filter", self.value)

    def on_response(self, response: Response, http_error_as_exception: bool) -> None:
        pass


class OtherFilter(HttpFilter):
    def on_request(self, request: Request) -> None:
        pass

    def on_response(self, response: Response, http_error_as_exception: bool) -> None:
        pass


@pytest.fixture
def request_(make_request: Callable[..., Request]) -> Request:
    return make_request(AsyncMock())


##############################
#     Tests for builders     #
##############################


def test_request_method_is_upper_case(make_request: Callable[..., Request]) -> None:
    assert make_request(AsyncMock(), method="post").method == "POST"


def test_request_repr(request_: Request) -> None:
    assert repr(request_) == "Request(GET https://api.example.com/ideas)"


def test_request_with_header_keeps_existing_values(request_: Request) -> None:
    request_.with_header("Accept", "application/json").with_header("Accept", "text/plain")
    assert request_.headers.get_list("Accept") == ["application/json", "text/plain"]


def test_request_with_headers(request_: Request) -> None:
    request_.with_headers({"X-A": "1", "X-B": "2"})
    assert request_.headers["X-A"] == "1"
    assert request_.headers["X-B"] == "2"


def test_request_with_basic_authentication(request_: Request) -> None:
    request_.with_basic_authentication("user", "pass")
    assert request_.headers["Authorization"] == "Basic dXNlcjpwYXNz"


def test_request_with_bearer_authentication(request_: Request) -> None:
    request_.with_bearer_authentication("token").with_bearer_authentication("other")
    assert request_.headers.get_list("Authorization") == ["Bearer other"]


def test_request_with_argument(request_: Request) -> None:
    request_.with_argument("page", 2).with_argument("tag", "a b")
    assert request_.url.params.multi_items() == [("page", "2"), ("tag", "a b")]


def test_request_with_argument_repeated_key(request_: Request) -> None:
    request_.with_argument("tag", "a").with_argument("tag", "b")
    assert request_.url.params.get_list("tag") == ["a", "b"]


def test_request_with_argument_none_ignored(request_: Request) -> None:
    request_.with_argument("tag", None)
    assert str(request_.url) == "https://api.example.com/ideas"


def test_request_with_argument_none_kept(request_: Request) -> None:
    request_.with_options(ignore_null_arguments=False).with_argument("tag", None)
    assert request_.url.params.multi_items() == [("tag", "")]


def test_request_with_arguments_skips_blank_keys(request_: Request) -> None:
    request_.with_arguments({"page": 1, "": "x", "  ": "y", "tag": None})
    assert request_.url.params.multi_items() == [("page", "1")]


def test_request_with_arguments_none(request_: Request) -> None:
    request_.with_arguments(None)
    assert str(request_.url) == "https://api.example.com/ideas"


def test_request_with_body_json(request_: Request) -> None:
    request_.with_body({"name": "idea", "tags": None})
    assert request_.content == b'{"name": "idea", "tags": null}'
    assert request_.headers["Content-Type"] == "application/json"
    assert request_.is_replayable


def test_request_with_body_content_type(request_: Request) -> None:
    request_.with_body("hello", content_type="text/plain")
    assert request_.content == b"hello"
    assert request_.headers["Content-Type"] == "text/plain"


def test_request_with_body_no_formatter(request_: Request) -> None:
    with pytest.raises(NoFormatterError, match=r"application/xml"):
        request_.with_body({"name": "idea"}, content_type="application/xml")


def test_request_with_body_content_bytes(request_: Request) -> None:
    request_.with_body_content(b"\x00\x01", content_type="application/octet-stream")
    assert request_.content == b"\x00\x01"
    assert request_.headers["Content-Type"] == "application/octet-stream"
    assert request_.is_replayable


def test_request_with_body_content_str(request_: Request) -> None:
    request_.with_body_content("hello")
    assert request_.content == b"hello"
    assert "Content-Type" not in request_.headers


def test_request_with_body_content_stream_not_replayable(request_: Request) -> None:
    async def chunks() -> AsyncIterator[bytes]:
        yield b"data"

    request_.with_body_content(chunks())
    assert not request_.is_replayable


def test_request_with_form_body(request_: Request) -> None:
    request_.with_form_body({"name": "my idea", "tag": None})
    assert request_.content == b"name=my+idea"
    assert request_.headers["Content-Type"] == "application/x-www-form-urlencoded"


def test_request_with_custom(request_: Request) -> None:
    request_.with_custom(lambda request: request.with_header("X-Custom", "yes"))
    assert request_.headers["X-Custom"] == "yes"


def test_request_with_timeout(request_: Request) -> None:
    request_.with_timeout(5.0)
    assert request_.build_message().extensions["timeout"] == httpx.Timeout(5.0).as_dict()


def test_request_with_cancellation_token(request_: Request) -> None:
    token = CancellationToken()
    assert request_.with_cancellation_token(token).cancellation_token is token


def test_request_http_error_as_exception_default(
    make_request: Callable[..., Request],
) -> None:
    assert make_request(AsyncMock()).http_error_as_exception
    assert not make_request(AsyncMock(), http_error_as_exception=False).http_error_as_exception


def test_request_with_options_ignore_http_errors(request_: Request) -> None:
    request_.with_options(ignore_http_errors=True)
    assert not request_.http_error_as_exception


def test_request_with_options_none_keeps_current(request_: Request) -> None:
    request_.with_options(RequestOptions(ignore_http_errors=True)).with_options(
        ignore_null_arguments=False
    )
    assert request_.options == RequestOptions(
        ignore_http_errors=True, ignore_null_arguments=False
    )


def test_request_with_request_coordinator_configs(request_: Request) -> None:
    config = RetryConfig(max_retries=2, should_retry=lambda response: False)
    request_.with_request_coordinator(config)
    assert isinstance(request_.request_coordinator, RetryCoordinator)
    assert request_.request_coordinator.configs == (config,)


def test_request_with_request_coordinator_none(make_request: Callable[..., Request]) -> None:
    request = make_request(AsyncMock(), request_coordinator=RetryCoordinator())
    assert request.with_request_coordinator(None).request_coordinator is None


def test_request_with_retry(request_: Request) -> None:
    request_.with_retry(3, lambda response: response.status_code == 503)
    assert request_.request_coordinator.configs[0].max_retries == 3


def test_request_with_filter_replaces_same_type(make_request: Callable[..., Request]) -> None:
    first = HeaderFilter("1")
    other = OtherFilter()
    second = HeaderFilter("2")
    request = make_request(AsyncMock(), filters=FilterCollection([first, other]))
    request.with_filter(second)
    assert list(request.filters) == [other, second]


def test_request_with_filter_keep_existing(make_request: Callable[..., Request]) -> None:
    first = HeaderFilter("1")
    second = HeaderFilter("2")
    request = make_request(AsyncMock(), filters=FilterCollection([first]))
    request.with_filter(second, remove_existing=False)
    assert list(request.filters) == [first, second]


def test_request_without_filter(make_request: Callable[..., Request]) -> None:
    request = make_request(AsyncMock(), filters=FilterCollection([HeaderFilter()]))
    request.without_filter(HeaderFilter)
    assert len(request.filters) == 0


def test_request_build_message(request_: Request) -> None:
    request_.with_header("X-A", "1").with_body({"a": 1})
    message = request_.build_message()
    assert message.method == "GET"
    assert message.url == "https://api.example.com/ideas"
    assert message.headers["X-A"] == "1"
    assert message.read() == b'{"a": 1}'


def test_request_build_message_new_before_dispatch(request_: Request) -> None:
    assert request_.build_message() is not request_.build_message()


###############################
#     Tests for execution     #
###############################


@pytest.mark.asyncio
async def test_request_await_returns_response(
    make_request: Callable[..., Request],
    make_dispatcher: Callable[..., AsyncMock],
    make_response: Callable[..., httpx.Response],
) -> None:
    request = make_request(make_dispatcher([make_response(200, text="ok")]))
    response = await request
    assert response is request.response
    assert response.status == 200
    assert request.is_dispatched


@pytest.mark.asyncio
async def test_request_dispatches_once(
    make_request: Callable[..., Request],
    make_dispatcher: Callable[..., AsyncMock],
    make_response: Callable[..., httpx.Response],
) -> None:
    dispatcher = make_dispatcher([make_response(200, text="ok")])
    request = make_request(dispatcher)
    await request
    await request
    assert await request.as_text() == "ok"
    dispatcher.assert_awaited_once_with(request)


@pytest.mark.asyncio
async def test_request_frozen_after_dispatch(
    make_request: Callable[..., Request],
    make_dispatcher: Callable[..., AsyncMock],
    make_response: Callable[..., httpx.Response],
) -> None:
    request = make_request(make_dispatcher([make_response(200)]))
    await request
    with pytest.raises(RuntimeError, match=r"already dispatched"):
        request.with_header("X-A", "1")
    with pytest.raises(RuntimeError, match=r"already dispatched"):
        request.with_argument("page", 1)
    with pytest.raises(RuntimeError, match=r"already dispatched"):
        request.with_filter(HeaderFilter())


@pytest.mark.asyncio
async def test_request_filter_mutation_is_dispatched(
    make_request: Callable[..., Request],
    make_response: Callable[..., httpx.Response],
) -> None:
    sent: list[httpx.Request] = []

    async def dispatcher(request: Request) -> httpx.Response:
        sent.append(request.build_message())
        return make_response(200)

    request = make_request(dispatcher, filters=FilterCollection([HeaderFilter("7")]))
    await request
    assert sent[0].headers["X-Filter"] == "7"


@pytest.mark.asyncio
async def test_request_filter_cannot_mutate_after_dispatch(
    make_request: Callable[..., Request],
    make_dispatcher: Callable[..., AsyncMock],
    make_response: Callable[..., httpx.Response],
) -> None:
    class LateFilter(HttpFilter):
        def on_request(self, request: Request) -> None:
            pass

        def on_response(self, response: Response, http_error_as_exception: bool) -> None:
            response.request.with_header("X-Late", "1")

    request = make_request(
        make_dispatcher([make_response(200)]), filters=FilterCollection([LateFilter()])
    )
    with pytest.raises(RuntimeError, match=r"already dispatched"):
        await request


@pytest.mark.asyncio
async def test_request_build_message_cached_after_dispatch(
    make_request: Callable[..., Request],
    make_response: Callable[..., httpx.Response],
) -> None:
    sent: list[httpx.Request] = []

    async def dispatcher(request: Request) -> httpx.Response:
        sent.append(request.build_message())
        return make_response(503 if len(sent) == 1 else 200)

    request = make_request(dispatcher).with_retry(1, lambda response: response.status_code == 503)
    await request
    assert len(sent) == 2
    assert sent[0] is sent[1]


@pytest.mark.asyncio
async def test_request_dispatch_error_propagates(
    make_request: Callable[..., Request],
    make_dispatcher: Callable[..., AsyncMock],
) -> None:
    request = make_request(make_dispatcher([httpx.ConnectError("refused")]))
    with pytest.raises(httpx.ConnectError, match=r"refused"):
        await request
    with pytest.raises(httpx.ConnectError, match=r"refused"):
        await request.as_text()


@pytest.mark.asyncio
async def test_request_concurrent_accessors_dispatch_once(
    make_request: Callable[..., Request],
    make_response: Callable[..., httpx.Response],
) -> None:
    calls = 0

    async def dispatcher(request: Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0)
        return make_response(200, json={"id": 1})

    request = make_request(dispatcher)
    results: list[Any] = await asyncio.gather(
        request.as_model(dict), request.as_text(), request.as_json()
    )
    assert calls == 1
    assert results[0] == {"id": 1}
    assert results[2] == {"id": 1}
