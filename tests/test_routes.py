"""Tests for restbind.routes -- route descriptors and decoding."""

from __future__ import annotations

import pytest

from restbind.exceptions import InvalidMethodError
from restbind.routes import (
    HTTP_METHODS,
    DecodedRoute,
    Route,
    RouteSpec,
    decode_route,
    describe,
    route,
)


# ---------------------------------------------------------------------------
# decode_route
# ---------------------------------------------------------------------------


class TestDecodeRoute:
    @pytest.mark.parametrize("path", ["/users", "/", "/users/1/orders", "relative"])
    def test_bare_path_is_get(self, path: str) -> None:
        assert decode_route(None, path) == DecodedRoute("GET", path)

    @pytest.mark.parametrize("verb", HTTP_METHODS)
    def test_embedded_verb(self, verb: str) -> None:
        assert decode_route(None, f"{verb} /users") == DecodedRoute(verb, "/users")

    @pytest.mark.parametrize("verb", ["post", "Put", "dElEtE", "patch", "get"])
    def test_embedded_verb_is_case_insensitive(self, verb: str) -> None:
        decoded = decode_route(None, f"{verb} /items")
        assert decoded.method == verb.upper()
        assert decoded.path == "/items"

    def test_splits_on_first_space_only(self) -> None:
        decoded = decode_route(None, "GET /search?q=a b")
        assert decoded == DecodedRoute("GET", "/search?q=a b")

    @pytest.mark.parametrize("token", ["FETCH", "HEAD", "OPTIONS", "trace"])
    def test_unknown_verb_raises(self, token: str) -> None:
        with pytest.raises(InvalidMethodError) as exc_info:
            decode_route(None, f"{token} /users")
        assert exc_info.value.token == token.upper()
        assert exc_info.value.route == f"{token} /users"
        assert "Invalid HTTP method" in str(exc_info.value)

    def test_explicit_method_without_space(self) -> None:
        assert decode_route("post", "/users") == DecodedRoute("POST", "/users")

    def test_explicit_method_wins_over_embedded(self) -> None:
        assert decode_route("PUT", "POST /users/1") == DecodedRoute("PUT", "/users/1")

    def test_explicit_invalid_method_raises(self) -> None:
        with pytest.raises(InvalidMethodError, match="CONNECT"):
            decode_route("connect", "/users")

    def test_embedded_invalid_method_raises_even_with_explicit(self) -> None:
        with pytest.raises(InvalidMethodError):
            decode_route("GET", "BOGUS /users")


# ---------------------------------------------------------------------------
# describe
# ---------------------------------------------------------------------------


class TestDescribe:
    def test_string_descriptor(self) -> None:
        assert describe("DELETE /users/3") == DecodedRoute("DELETE", "/users/3")

    def test_structured_descriptor_without_method(self) -> None:
        assert describe(RouteSpec(route="/users")) == DecodedRoute("GET", "/users")

    def test_structured_descriptor_with_method(self) -> None:
        assert describe(RouteSpec(route="/users", method="patch")) == DecodedRoute("PATCH", "/users")

    def test_other_types_rejected(self) -> None:
        with pytest.raises(TypeError, match="RouteSpec"):
            describe({"route": "/users"})  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Route definitions
# ---------------------------------------------------------------------------


class TestRoute:
    def test_decorator_wraps_constructor(self) -> None:
        @route
        def get_user(user_id: int) -> str:
            return f"/users/{user_id}"

        assert isinstance(get_user, Route)
        assert get_user.name == "get_user"
        assert get_user.build(7) == "/users/7"

    def test_build_forwards_kwargs(self) -> None:
        r = Route(lambda *, page: RouteSpec(route="/users", query_parameters={"page": page}))
        spec = r.build(page=2)
        assert isinstance(spec, RouteSpec)
        assert spec.query_parameters == {"page": 2}

    def test_coerce_string_is_constant_route(self) -> None:
        r = Route.coerce("POST /ping")
        assert r.build() == "POST /ping"

    def test_coerce_callable(self) -> None:
        def listing() -> str:
            return "/list"

        r = Route.coerce(listing)
        assert r.name == "listing"
        assert r.build() == "/list"

    def test_coerce_route_is_identity(self) -> None:
        r = Route(lambda: "/x")
        assert Route.coerce(r) is r

    def test_coerce_rejects_other_values(self) -> None:
        with pytest.raises(TypeError):
            Route.coerce(42)
