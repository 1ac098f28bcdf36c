"""Request and Result values threaded through the hook pipeline.

Both are plain dataclasses with two ways to change them:

* **Mutators** (``add_headers``, ``set_body``, ...) assign in place and
  return ``None``. They exist for hooks that prefer to build up a request
  imperatively within a single invocation.
* :meth:`Request.merge` / :meth:`Result.merge` return a **new** value and
  never touch the receiver. ``headers`` are unioned rather than replaced.

A hook's return value replaces the working request or result, so a hook may
use either style as long as it returns the value it wants to pass on.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from restbind.exceptions import InvalidMethodError
from restbind.routes import HTTP_METHODS

T = TypeVar("T")

QueryValue = Union[str, int, float, bool]


def json_encode(body: Any) -> str:
    """Default encoder: compact JSON, non-ASCII left unescaped."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def json_decode(text: str) -> Any:
    """Default decoder: :func:`json.loads`."""
    return json.loads(text)


def _union_hooks(current: list[Any], changes: list[Any]) -> list[Any]:
    # Entries in *changes* replace the hook at the same index; extras extend.
    merged = list(current)
    for index, hook in enumerate(changes):
        if index < len(merged):
            merged[index] = hook
        else:
            merged.append(hook)
    return merged


def _check_fields(cls: type, changes: dict[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise TypeError(f"{cls.__name__}.merge() got unknown field(s): {', '.join(unknown)}")


@dataclass
class Request:
    """One pending HTTP call.

    Attributes:
        method: Uppercased HTTP method.
        path: Path relative to ``base_url`` and the resource prefix.
        base_url: Scheme and host (plus optional base path) of the API.
        headers: Request headers. Keys are matched case-sensitively.
        query_parameters: Query parameters, rendered in insertion order.
        body: Payload; passthrough kinds are sent unencoded.
        encoder: Payload -> wire text function.
        decoder: Wire text -> payload function.
        timeout: Deadline in seconds, or ``None`` for no deadline.
        abort_signal: :class:`asyncio.Event` that cancels the call when set.
        hooks: Hooks contributed by the route descriptor.
    """

    method: str
    path: str
    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    query_parameters: dict[str, QueryValue] = field(default_factory=dict)
    body: Any = None
    encoder: Callable[[Any], str] = json_encode
    decoder: Callable[[str], Any] = json_decode
    timeout: Optional[float] = None
    abort_signal: Any = None
    hooks: list[Any] = field(default_factory=list)

    # ------------------------------------------------------------------ #
    # In-place mutators
    # ------------------------------------------------------------------ #

    def add_headers(self, headers: dict[str, str]) -> None:
        self.headers = {**self.headers, **headers}

    def set_headers(self, headers: dict[str, str]) -> None:
        self.headers = dict(headers)

    def add_query_parameters(self, query_parameters: dict[str, QueryValue]) -> None:
        self.query_parameters = {**self.query_parameters, **query_parameters}

    def set_query_parameters(self, query_parameters: dict[str, QueryValue]) -> None:
        self.query_parameters = dict(query_parameters)

    def set_body(self, body: Any) -> None:
        self.body = body

    def set_encoder(self, encoder: Callable[[Any], str]) -> None:
        self.encoder = encoder

    def set_decoder(self, decoder: Callable[[str], Any]) -> None:
        self.decoder = decoder

    def set_path(self, path: str) -> None:
        self.path = path

    def set_method(self, method: str) -> None:
        """Set the HTTP method.

        Raises:
            InvalidMethodError: If *method* is not a supported verb.
        """
        upper = method.upper()
        if upper not in HTTP_METHODS:
            raise InvalidMethodError(upper, self.path)
        self.method = upper

    def set_base_url(self, base_url: str) -> None:
        self.base_url = base_url

    def set_timeout(self, timeout: Optional[float]) -> None:
        self.timeout = timeout

    def set_abort_signal(self, signal: Any) -> None:
        self.abort_signal = signal

    # ------------------------------------------------------------------ #
    # Copying
    # ------------------------------------------------------------------ #

    def merge(self, **changes: Any) -> Request:
        """Return a new request with *changes* applied.

        ``headers`` are unioned with the receiver's (changes win) and
        ``hooks`` are unioned by position; every other field given is
        replaced wholesale. The receiver is left untouched.

        Raises:
            TypeError: If a change names an unknown field.
        """
        _check_fields(Request, changes)
        if "headers" in changes:
            changes["headers"] = {**self.headers, **(changes["headers"] or {})}
        if "hooks" in changes:
            changes["hooks"] = _union_hooks(self.hooks, changes["hooks"] or [])
        changes.setdefault("headers", dict(self.headers))
        changes.setdefault("query_parameters", dict(self.query_parameters))
        changes.setdefault("hooks", list(self.hooks))
        return replace(self, **changes)

    @property
    def uses_default_encoder(self) -> bool:
        return self.encoder is json_encode

    @property
    def uses_default_decoder(self) -> bool:
        return self.decoder is json_decode

    def has_header(self, name: str) -> bool:
        """Case-sensitive header presence check."""
        return name in self.headers


@dataclass
class Result(Generic[T]):
    """A completed call.

    Attributes:
        status_code: HTTP status code of the response.
        headers: Response headers.
        data: Decoded response payload.
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    data: Optional[T] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def merge(self, **changes: Any) -> Result[T]:
        """Return a new result with *changes* applied; ``headers`` are unioned."""
        _check_fields(Result, changes)
        if "headers" in changes:
            changes["headers"] = {**self.headers, **(changes["headers"] or {})}
        else:
            changes["headers"] = dict(self.headers)
        return replace(self, **changes)
