r"""Formatter of URL-encoded form bodies."""

from __future__ import annotations

__all__ = ["FormUrlEncodedFormatter"]

from collections.abc import Mapping
from typing import Any, ClassVar, get_origin
from urllib.parse import parse_qsl, urlencode

from afluent.formatters.base import DEFAULT_ENCODING, BaseMediaTypeFormatter


def _is_mapping_type(type_: Any) -> bool:
    origin = get_origin(type_) or type_
    return isinstance(origin, type) and issubclass(origin, Mapping)


class FormUrlEncodedFormatter(BaseMediaTypeFormatter):
    r"""Read and write ``application/x-www-form-urlencoded`` bodies.

    Forms are read as ``dict[str, str]``; when a key is repeated, the
    last value wins. ``None`` values are skipped when writing.

    Example:
        ```pycon
        >>> from afluent.formatters import FormUrlEncodedFormatter
        >>> formatter = FormUrlEncodedFormatter()
        >>> formatter.serialize({"name": "a b", "page": 2, "missing": None})
        b'name=a+b&page=2'
        >>> formatter.deserialize(b"name=a+b&page=2", dict)
        {'name': 'a b', 'page': '2'}

        ```
    """

    media_types: ClassVar[tuple[str, ...]] = ("application/x-www-form-urlencoded",)

    def can_read_type(self, type_: Any) -> bool:
        return _is_mapping_type(type_)

    def can_write_type(self, type_: Any) -> bool:
        return _is_mapping_type(type_)

    def serialize(self, value: Any, encoding: str = DEFAULT_ENCODING) -> bytes:
        items = value.items() if isinstance(value, Mapping) else value
        pairs = [(str(key), str(item)) for key, item in items if item is not None]
        return urlencode(pairs, encoding=encoding).encode(encoding)

    def deserialize(self, content: bytes, type_: Any, encoding: str = DEFAULT_ENCODING) -> Any:  # noqa: ARG002
        return dict(parse_qsl(content.decode(encoding), keep_blank_values=True))
