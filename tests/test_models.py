"""Tests for restbind.models -- ClientOptions and Resource validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from restbind.hooks import Hook
from restbind.models import ClientOptions, Resource
from restbind.routes import Route


class TestClientOptions:
    def test_defaults(self) -> None:
        options = ClientOptions()
        assert options.headers == {}
        assert options.hooks == []
        assert options.timeout is None

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ClientOptions(timeout=0)

    def test_frozen(self) -> None:
        options = ClientOptions(timeout=1)
        with pytest.raises(ValidationError):
            options.timeout = 2  # type: ignore[misc]

    def test_scope(self) -> None:
        h = Hook()
        scope = ClientOptions(headers={"A": "1"}, hooks=[h], timeout=5).scope()
        assert dict(scope.headers) == {"A": "1"}
        assert tuple(scope.hooks) == (h,)
        assert scope.timeout == 5


class TestResource:
    def test_routes_coerced(self) -> None:
        explicit = Route(lambda: "/c")
        resource = Resource(routes={"a": "/a", "b": lambda: "/b", "c": explicit})
        assert all(isinstance(r, Route) for r in resource.routes.values())
        assert resource.routes["a"].build() == "/a"
        assert resource.routes["b"].build() == "/b"
        assert resource.routes["c"] is explicit

    def test_route_order_preserved(self) -> None:
        resource = Resource(routes={"z": "/z", "a": "/a", "m": "/m"})
        assert list(resource.routes) == ["z", "a", "m"]

    def test_invalid_route_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Cannot build a route"):
            Resource(routes={"bad": 3})

    def test_scope(self) -> None:
        resource = Resource(prefix="/v1", headers={"B": "2"}, timeout=4)
        scope = resource.scope()
        assert dict(scope.headers) == {"B": "2"}
        assert scope.timeout == 4
        assert resource.prefix == "/v1"
