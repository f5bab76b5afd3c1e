r"""Unit tests for request filters."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, Mock

import pytest

from afluent import FilterCollection, HttpFilter

if TYPE_CHECKING:
    from collections.abc import Callable

    from afluent import Request, Response


class RecordingFilter(HttpFilter):
    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    def on_request(self, request: Request) -> None:
        self.log.append(f"{self.name}.request")

    def on_response(self, response: Response, http_error_as_exception: bool) -> None:
        self.log.append(f"{self.name}.response({http_error_as_exception})")


class OtherFilter(RecordingFilter):
    pass


def test_http_filter_is_abstract() -> None:
    with pytest.raises(TypeError, match=r"Can't instantiate abstract class"):
        HttpFilter()  # type: ignore[abstract]


def test_filter_collection_add() -> None:
    first = RecordingFilter("a", [])
    second = RecordingFilter("b", [])
    filters = FilterCollection().add(first).add(second)
    assert list(filters) == [first, second]
    assert len(filters) == 2
    assert first in filters


def test_filter_collection_remove_first_instance() -> None:
    first = RecordingFilter("a", [])
    second = RecordingFilter("b", [])
    filters = FilterCollection([first, second])
    assert filters.remove(RecordingFilter)
    assert list(filters) == [second]


def test_filter_collection_remove_subclass() -> None:
    other = OtherFilter("a", [])
    filters = FilterCollection([other])
    assert filters.remove(RecordingFilter)
    assert len(filters) == 0


def test_filter_collection_remove_missing() -> None:
    filters = FilterCollection([RecordingFilter("a", [])])
    assert not filters.remove(OtherFilter)
    assert len(filters) == 1


def test_filter_collection_copy_is_independent() -> None:
    first = RecordingFilter("a", [])
    filters = FilterCollection([first])
    copy = filters.copy()
    copy.add(RecordingFilter("b", []))
    assert len(filters) == 1
    assert list(copy)[0] is first


def test_filter_collection_clear() -> None:
    filters = FilterCollection([RecordingFilter("a", [])])
    filters.clear()
    assert len(filters) == 0


def test_filter_collection_apply_in_registration_order(
    make_request: Callable[..., Request],
) -> None:
    log: list[str] = []
    filters = FilterCollection([RecordingFilter("a", log), RecordingFilter("b", log)])
    request = make_request(AsyncMock())

    filters.apply_before_send(request)
    filters.apply_after_receive(request.response, True)

    assert log == ["a.request", "b.request", "a.response(True)", "b.response(True)"]


def test_filter_collection_apply_after_receive_shares_response() -> None:
    response = Mock()

    class MarkFilter(HttpFilter):
        def on_request(self, request: Request) -> None:
            pass

        def on_response(self, response: Response, http_error_as_exception: bool) -> None:
            response.marks = [*getattr(response, "marks", []), "a"]

    class ReadMarkFilter(HttpFilter):
        seen: list[str] | None = None

        def on_request(self, request: Request) -> None:
            pass

        def on_response(self, response: Response, http_error_as_exception: bool) -> None:
            ReadMarkFilter.seen = list(response.marks)

    response.marks = []
    FilterCollection([MarkFilter(), ReadMarkFilter()]).apply_after_receive(response, False)
    assert ReadMarkFilter.seen == ["a"]


def test_filter_collection_error_propagates(make_request: Callable[..., Request]) -> None:
    class FailingFilter(HttpFilter):
        def on_request(self, request: Request) -> None:
            msg = "rejected"
            raise ValueError(msg)

        def on_response(self, response: Response, http_error_as_exception: bool) -> None:
            pass

    log: list[str] = []
    filters = FilterCollection([FailingFilter(), RecordingFilter("b", log)])
    with pytest.raises(ValueError, match=r"rejected"):
        filters.apply_before_send(make_request(AsyncMock()))
    assert log == []
