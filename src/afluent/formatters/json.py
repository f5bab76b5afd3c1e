r"""Formatter of JSON message bodies."""

from __future__ import annotations

__all__ = ["JsonFormatter"]

import functools
import json
from typing import Any, ClassVar

from pydantic import TypeAdapter

from afluent.formatters.base import DEFAULT_ENCODING, BaseMediaTypeFormatter

_RAW_TYPES = (None, object)


@functools.lru_cache(maxsize=256)
def _get_type_adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def _default(value: Any) -> Any:
    try:
        return _get_type_adapter(type(value)).dump_python(value, mode="json")
    except (TypeError, ValueError) as exc:
        msg = f"Object of type {type(value).__name__} is not JSON serializable"
        raise TypeError(msg) from exc


class JsonFormatter(BaseMediaTypeFormatter):
    r"""Serialize and deserialize JSON bodies.

    Documents are validated into the requested type with a pydantic
    ``TypeAdapter``, so dataclasses, pydantic models and typed
    containers can be read directly. Values that ``json`` cannot encode
    (dataclasses, models, datetimes, enums, sets) are dumped by pydantic
    in JSON mode.

    Example:
        ```pycon
        >>> from afluent.formatters import JsonFormatter
        >>> formatter = JsonFormatter()
        >>> formatter.serialize({"id": 1})
        b'{"id": 1}'
        >>> formatter.deserialize(b'[1, 2]', list[float])
        [1.0, 2.0]

        ```
    """

    media_types: ClassVar[tuple[str, ...]] = (
        "application/json",
        "text/json",
        "application/problem+json",
    )

    def serialize(self, value: Any, encoding: str = DEFAULT_ENCODING) -> bytes:
        return json.dumps(value, default=_default).encode(encoding)

    def deserialize(self, content: bytes, type_: Any, encoding: str = DEFAULT_ENCODING) -> Any:
        r"""Validate a JSON body into ``type_``.

        An empty body is read as ``None``.

        Raises:
            pydantic.ValidationError: If the document does not match
                the type.
        """
        if not content:
            return None
        if type_ in _RAW_TYPES:
            type_ = Any
        return _get_type_adapter(type_).validate_json(content.decode(encoding))
