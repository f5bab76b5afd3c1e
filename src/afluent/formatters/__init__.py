r"""Media type formatters used to read and write message bodies."""

from __future__ import annotations

__all__ = [
    "BaseMediaTypeFormatter",
    "FormUrlEncodedFormatter",
    "FormatterCollection",
    "JsonFormatter",
    "PlainTextFormatter",
]

from afluent.formatters.base import BaseMediaTypeFormatter
from afluent.formatters.collection import FormatterCollection
from afluent.formatters.form import FormUrlEncodedFormatter
from afluent.formatters.json import JsonFormatter
from afluent.formatters.text import PlainTextFormatter
