"""Route descriptors and the route decoder.

A route constructor returns one of two descriptor shapes:

* a bare string -- ``"/users"`` (implies GET) or ``"POST /users"``;
* a :class:`RouteSpec` -- a structured descriptor that may also carry
  headers, a body, query parameters, hooks, a timeout and codec overrides.

:func:`describe` dispatches on the shape and :func:`decode_route` turns the
route text into a normalized :class:`DecodedRoute`.

Example::

    from restbind.routes import RouteSpec, route

    @route
    def create(name: str) -> RouteSpec:
        return RouteSpec(route="POST /users", body={"name": name})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional, Union

from restbind.exceptions import InvalidMethodError

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
"""HTTP methods accepted in route descriptors."""


class DecodedRoute(NamedTuple):
    """A normalized ``(method, path)`` pair."""

    method: str
    path: str


@dataclass
class RouteSpec:
    """Structured route descriptor.

    Only ``route`` is required. Fields left as ``None`` do not override the
    resource or global defaults.

    Attributes:
        route: Path, optionally prefixed with a method (``"PUT /users/1"``).
        method: Explicit HTTP method; wins over a method embedded in ``route``.
        headers: Extra headers, merged over resource and global headers.
        timeout: Timeout in seconds, overriding resource and global timeouts.
        body: Request payload. Passthrough kinds are sent unencoded.
        query_parameters: Ordered query parameters.
        hooks: Hooks that run after the global and resource hooks.
        encoder: Payload -> wire text function replacing the JSON encoder.
        decoder: Wire text -> payload function replacing the JSON decoder.
        abort_signal: An :class:`asyncio.Event` that cancels the call when set.
    """

    route: str
    method: Optional[str] = None
    headers: Optional[dict[str, str]] = None
    timeout: Optional[float] = None
    body: Any = None
    query_parameters: Optional[dict[str, Any]] = None
    hooks: Optional[list[Any]] = None
    encoder: Optional[Callable[[Any], str]] = None
    decoder: Optional[Callable[[str], Any]] = None
    abort_signal: Any = None


RouteDescriptor = Union[str, RouteSpec]


def _normalize_method(token: str, route: str) -> str:
    method = token.upper()
    if method not in HTTP_METHODS:
        raise InvalidMethodError(method, route)
    return method


def decode_route(method: Optional[str], route: str) -> DecodedRoute:
    """Decode route text into a method and a path.

    Args:
        method: Method supplied by a structured descriptor, or ``None``.
        route: Route text, either ``"/path"`` or ``"VERB /path"``.

    Returns:
        The decoded route.

    Raises:
        InvalidMethodError: If the embedded or explicit method is not one of
            :data:`HTTP_METHODS`.
    """
    if " " not in route:
        if method is None:
            return DecodedRoute("GET", route)
        return DecodedRoute(_normalize_method(method, route), route)

    token, path = route.split(" ", 1)
    embedded = _normalize_method(token, route)
    if method is not None:
        return DecodedRoute(_normalize_method(method, route), path)
    return DecodedRoute(embedded, path)


def describe(descriptor: RouteDescriptor) -> DecodedRoute:
    """Decode either descriptor shape.

    Raises:
        TypeError: If *descriptor* is neither a string nor a :class:`RouteSpec`.
    """
    if isinstance(descriptor, str):
        return decode_route(None, descriptor)
    if isinstance(descriptor, RouteSpec):
        return decode_route(descriptor.method, descriptor.route)
    raise TypeError(
        f"Route constructor must return str or RouteSpec, got {type(descriptor).__name__}"
    )


class Route:
    """A route definition wrapping its descriptor constructor.

    Args:
        constructor: Called with the route call's arguments; returns a
            route descriptor.
        name: Optional display name used in log records.
    """

    def __init__(
        self,
        constructor: Callable[..., RouteDescriptor],
        name: Optional[str] = None,
    ) -> None:
        self.constructor = constructor
        self.name = name

    def __repr__(self) -> str:
        return f"Route({self.name or self.constructor!r})"

    def build(self, *args: Any, **kwargs: Any) -> RouteDescriptor:
        return self.constructor(*args, **kwargs)

    @classmethod
    def coerce(cls, value: Any) -> Route:
        """Normalize a route declaration.

        Accepts a :class:`Route`, a bare string (a constant route taking no
        arguments) or any callable returning a descriptor.
        """
        if isinstance(value, Route):
            return value
        if isinstance(value, str):
            return cls(lambda: value)
        if callable(value):
            return cls(value, name=getattr(value, "__name__", None))
        raise TypeError(f"Cannot build a route from {type(value).__name__}")


def route(constructor: Callable[..., RouteDescriptor]) -> Route:
    """Wrap *constructor* in a :class:`Route`; usable as a decorator."""
    return Route(constructor, name=getattr(constructor, "__name__", None))
