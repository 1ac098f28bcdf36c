"""Passthrough request bodies.

A passthrough body is handed to the transport as-is instead of going
through the request's encoder:

* ``str`` -- raw text;
* ``bytes``, ``bytearray``, ``memoryview`` -- binary buffers;
* :class:`FormData` -- a multipart form;
* :class:`httpx.QueryParams` -- an already-encoded urlencoded form;
* byte streams -- any iterator or async iterable yielding ``bytes``.

Everything else (dicts, lists, numbers, models, ...) is encoded.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx

_BUFFER_TYPES = (str, bytes, bytearray, memoryview)


@dataclass
class FormData:
    """A form payload for the default transport.

    Sent as ``multipart/form-data`` when it carries files. A fields-only
    form is sent urlencoded, following httpx's encoding rules.

    Attributes:
        fields: Plain form fields.
        files: File fields, in any shape :mod:`httpx` accepts for ``files=``
            (a file object, bytes, or a ``(filename, content[, content_type])``
            tuple).
    """

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, Any] = field(default_factory=dict)

    def add_field(self, name: str, value: str) -> None:
        self.fields[name] = value

    def add_file(self, name: str, file: Any) -> None:
        self.files[name] = file


def is_stream(body: Any) -> bool:
    """True for byte iterators and async iterables."""
    return isinstance(body, (Iterator, AsyncIterable))


def is_passthrough(body: Any) -> bool:
    """True if *body* must be sent without encoding."""
    return (
        isinstance(body, _BUFFER_TYPES)
        or isinstance(body, (FormData, httpx.QueryParams))
        or is_stream(body)
    )
