r"""Middleware invoked around the dispatch of a request.

Filters observe the request just before it is dispatched and the
response once its final result is known. They only see the logical call:
retried attempts are invisible to them.
"""

from __future__ import annotations

__all__ = ["FilterCollection", "HttpFilter"]

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from afluent.request import Request
    from afluent.response import Response

logger: logging.Logger = logging.getLogger(__name__)


class HttpFilter(ABC):
    """Base class of the request filters.

    A filter can mutate the request in ``on_request`` and the response in
    ``on_response``. Each hook runs exactly once per logical call.

    Example:
        ```pycon
        >>> from afluent import HttpFilter
        >>> class TraceFilter(HttpFilter):
        ...     def on_request(self, request):
        ...         request.with_header("X-Trace", "1")
        ...     def on_response(self, response, http_error_as_exception):
        ...         pass
        ...
        >>> TraceFilter()
        TraceFilter()

        ```
    """

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}()"

    @abstractmethod
    def on_request(self, request: Request) -> None:
        r"""Called before the request is dispatched.

        Args:
            request: The request, which can still be modified.
        """

    @abstractmethod
    def on_response(self, response: Response, http_error_as_exception: bool) -> None:
        r"""Called once the final result of the request is known.

        Args:
            response: The response. Its body is already buffered.
            http_error_as_exception: Whether reading the response will
                raise an ``ApiError`` for an HTTP error status.
        """


class FilterCollection:
    r"""Ordered collection of filters.

    Both hooks are applied in registration order.

    Args:
        filters: The initial filters.

    Example:
        ```pycon
        >>> from afluent import FilterCollection
        >>> filters = FilterCollection()
        >>> len(filters)
        0

        ```
    """

    def __init__(self, filters: Iterable[HttpFilter] = ()) -> None:
        self._filters: list[HttpFilter] = list(filters)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self._filters!r})"

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[HttpFilter]:
        return iter(self._filters)

    def __contains__(self, item: object) -> bool:
        return item in self._filters

    def add(self, filter_: HttpFilter) -> FilterCollection:
        """Add a filter at the end of the collection."""
        self._filters.append(filter_)
        return self

    def remove(self, filter_type: type[HttpFilter]) -> bool:
        r"""Remove the first filter of a given type.

        Args:
            filter_type: The filter type to remove. Subclasses match.

        Returns:
            ``True`` if a filter was removed, otherwise ``False``.
        """
        for index, filter_ in enumerate(self._filters):
            if isinstance(filter_, filter_type):
                del self._filters[index]
                return True
        return False

    def clear(self) -> None:
        self._filters.clear()

    def copy(self) -> FilterCollection:
        """Return a shallow copy, sharing the filter instances."""
        return FilterCollection(self._filters)

    def apply_before_send(self, request: Request) -> None:
        """Call ``on_request`` of every filter in order."""
        for filter_ in tuple(self._filters):
            logger.debug(f"Applying {filter_!r} to {request.method} request to {request.url}")
            filter_.on_request(request)

    def apply_after_receive(self, response: Response, http_error_as_exception: bool) -> None:
        """Call ``on_response`` of every filter in order."""
        for filter_ in tuple(self._filters):
            filter_.on_response(response, http_error_as_exception)
