r"""Formatter of plain text message bodies."""

from __future__ import annotations

__all__ = ["PlainTextFormatter"]

from typing import Any, ClassVar

from afluent.formatters.base import DEFAULT_ENCODING, BaseMediaTypeFormatter


class PlainTextFormatter(BaseMediaTypeFormatter):
    r"""Read and write ``text/plain`` bodies as strings.

    Example:
        ```pycon
        >>> from afluent.formatters import PlainTextFormatter
        >>> formatter = PlainTextFormatter()
        >>> formatter.can_read_type(str), formatter.can_read_type(int)
        (True, False)
        >>> formatter.deserialize(b"hello", str)
        'hello'

        ```
    """

    media_types: ClassVar[tuple[str, ...]] = ("text/plain",)

    def can_read_type(self, type_: Any) -> bool:
        return type_ in (str, object, Any)

    def can_write_type(self, type_: Any) -> bool:
        return type_ is str

    def serialize(self, value: Any, encoding: str = DEFAULT_ENCODING) -> bytes:
        return str(value).encode(encoding)

    def deserialize(self, content: bytes, type_: Any, encoding: str = DEFAULT_ENCODING) -> Any:  # noqa: ARG002
        return content.decode(encoding)
