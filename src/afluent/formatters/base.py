r"""Define the base class of the media type formatters."""

from __future__ import annotations

__all__ = ["BaseMediaTypeFormatter"]

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from afluent.utils.response import normalize_media_type

DEFAULT_ENCODING = "utf-8"


class BaseMediaTypeFormatter(ABC):
    r"""Serialize and deserialize message bodies of some media types.

    Subclasses declare the media types they handle in ``media_types``
    and implement ``serialize`` and ``deserialize``.
    """

    media_types: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}()"

    @property
    def default_media_type(self) -> str:
        """The media type used when writing a body."""
        return self.media_types[0]

    def supports(self, media_type: str | None) -> bool:
        r"""Indicate whether the formatter handles a media type.

        Media type parameters (e.g. ``charset``) are ignored and the
        comparison is case-insensitive.
        """
        return normalize_media_type(media_type) in self.media_types

    def can_read_type(self, type_: Any) -> bool:  # noqa: ARG002
        """Indicate whether a body can be deserialized into ``type_``."""
        return True

    def can_write_type(self, type_: Any) -> bool:  # noqa: ARG002
        """Indicate whether a value of type ``type_`` can be serialized."""
        return True

    @abstractmethod
    def serialize(self, value: Any, encoding: str = DEFAULT_ENCODING) -> bytes:
        r"""Serialize a value into a message body.

        Args:
            value: The value to serialize.
            encoding: The text encoding of the body.

        Returns:
            The body bytes.
        """

    @abstractmethod
    def deserialize(self, content: bytes, type_: Any, encoding: str = DEFAULT_ENCODING) -> Any:
        r"""Deserialize a message body.

        Args:
            content: The body bytes.
            type_: The type of the returned value.
            encoding: The text encoding of the body.

        Returns:
            The deserialized value.
        """
