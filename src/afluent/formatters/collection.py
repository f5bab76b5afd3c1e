r"""Ordered registry of media type formatters."""

from __future__ import annotations

__all__ = ["FormatterCollection"]

import logging
from typing import TYPE_CHECKING, Any

from afluent.exceptions import NoFormatterError
from afluent.formatters.form import FormUrlEncodedFormatter
from afluent.formatters.json import JsonFormatter
from afluent.formatters.text import PlainTextFormatter
from afluent.utils.response import normalize_media_type

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from afluent.formatters.base import BaseMediaTypeFormatter

logger: logging.Logger = logging.getLogger(__name__)


class FormatterCollection:
    r"""Ordered collection of formatters selected by media type.

    The first formatter which supports a media type and the target type
    wins.

    Args:
        formatters: The formatters, in selection order.

    Example:
        ```pycon
        >>> from afluent.formatters import FormatterCollection
        >>> formatters = FormatterCollection.default()
        >>> formatters.get_reader("application/json; charset=utf-8", dict)
        JsonFormatter()
        >>> formatters.get_writer(None, dict)
        JsonFormatter()

        ```
    """

    def __init__(self, formatters: Iterable[BaseMediaTypeFormatter] = ()) -> None:
        self._formatters: list[BaseMediaTypeFormatter] = list(formatters)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self._formatters!r})"

    def __len__(self) -> int:
        return len(self._formatters)

    def __iter__(self) -> Iterator[BaseMediaTypeFormatter]:
        return iter(self._formatters)

    @classmethod
    def default(cls) -> FormatterCollection:
        """Create a collection with the JSON, plain text and form
        formatters."""
        return cls([JsonFormatter(), PlainTextFormatter(), FormUrlEncodedFormatter()])

    def add(self, formatter: BaseMediaTypeFormatter) -> FormatterCollection:
        """Add a formatter with the lowest priority."""
        self._formatters.append(formatter)
        return self

    def insert(self, index: int, formatter: BaseMediaTypeFormatter) -> FormatterCollection:
        """Insert a formatter at a given priority."""
        self._formatters.insert(index, formatter)
        return self

    def remove(self, formatter_type: type[BaseMediaTypeFormatter]) -> bool:
        """Remove the first formatter of a given type."""
        for index, formatter in enumerate(self._formatters):
            if isinstance(formatter, formatter_type):
                del self._formatters[index]
                return True
        return False

    def find_reader(self, media_type: str | None, type_: Any) -> BaseMediaTypeFormatter | None:
        for formatter in self._formatters:
            if formatter.supports(media_type) and formatter.can_read_type(type_):
                return formatter
        return None

    def get_reader(self, media_type: str | None, type_: Any) -> BaseMediaTypeFormatter:
        r"""Get the formatter which deserializes a media type.

        Args:
            media_type: The media type of the body, parameters allowed.
            type_: The type to deserialize into.

        Returns:
            The first matching formatter.

        Raises:
            NoFormatterError: If no formatter matches.
        """
        formatter = self.find_reader(media_type, type_)
        if formatter is None:
            raise NoFormatterError(normalize_media_type(media_type), type_)
        logger.debug(f"Selected {formatter!r} to read {media_type} as {type_!r}")
        return formatter

    def get_writer(self, media_type: str | None, type_: Any) -> BaseMediaTypeFormatter:
        r"""Get the formatter which serializes a value.

        Args:
            media_type: The requested media type. If ``None``, the
                first formatter which can write the type is used.
            type_: The type of the value to serialize.

        Returns:
            The first matching formatter.

        Raises:
            NoFormatterError: If no formatter matches.
        """
        for formatter in self._formatters:
            if (media_type is None or formatter.supports(media_type)) and formatter.can_write_type(
                type_
            ):
                return formatter
        raise NoFormatterError(normalize_media_type(media_type), type_)
