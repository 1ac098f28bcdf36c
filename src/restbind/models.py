"""Pydantic models for client configuration.

Two models describe everything :func:`~restbind.client.create_client`
consumes:

* :class:`ClientOptions` -- the global scope (headers, hooks, timeout)
  shared by every resource.
* :class:`Resource` -- one resource: a path prefix, its own scope, and the
  named routes it exposes.

Both are validated once at client-construction time and then shared
read-only by every call. Plain dicts are accepted wherever a model is
expected.

Example::

    Resource(
        prefix="/users",
        headers={"Accept": "application/json"},
        routes={
            "list": "/",
            "get": lambda user_id: f"/{user_id}",
        },
    )
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restbind.layers import Scope
from restbind.routes import Route


class ClientOptions(BaseModel):
    """Client-wide defaults (the global scope)."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    hooks: list[Any] = Field(
        default_factory=list, description="Hooks run before resource and route hooks"
    )
    timeout: Optional[float] = Field(
        default=None, gt=0, description="Default timeout in seconds"
    )

    def scope(self) -> Scope:
        return Scope(headers=dict(self.headers), hooks=tuple(self.hooks), timeout=self.timeout)


class Resource(BaseModel):
    """A group of routes sharing a prefix, headers, hooks and a timeout.

    ``routes`` values may be :class:`~restbind.routes.Route` instances,
    bare strings (constant routes) or callables returning a route
    descriptor; all are normalized to :class:`~restbind.routes.Route`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    prefix: Optional[str] = Field(
        default=None, description="Path prefix inserted between base URL and route path"
    )
    headers: dict[str, str] = Field(default_factory=dict)
    hooks: list[Any] = Field(default_factory=list)
    timeout: Optional[float] = Field(default=None, gt=0, description="Timeout in seconds")
    routes: dict[str, Route] = Field(default_factory=dict)

    @field_validator("routes", mode="before")
    @classmethod
    def _coerce_routes(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        try:
            return {name: Route.coerce(definition) for name, definition in value.items()}
        except TypeError as exc:
            raise ValueError(str(exc)) from exc

    def scope(self) -> Scope:
        return Scope(headers=dict(self.headers), hooks=tuple(self.hooks), timeout=self.timeout)
