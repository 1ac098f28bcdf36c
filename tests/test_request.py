"""Tests for restbind.request -- Request/Result mutators and merge."""

from __future__ import annotations

import asyncio

import pytest

from restbind.exceptions import InvalidMethodError
from restbind.request import Request, Result, json_decode, json_encode


def _make_request(**overrides) -> Request:
    fields = {
        "method": "GET",
        "path": "/users",
        "base_url": "https://api.example.com",
        "headers": {"Accept": "application/json"},
    }
    fields.update(overrides)
    return Request(**fields)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_default_codec(self) -> None:
        request = Request(method="GET", path="/")
        assert request.encoder is json_encode
        assert request.decoder is json_decode
        assert request.uses_default_encoder
        assert request.uses_default_decoder

    def test_json_encode_is_compact(self) -> None:
        assert json_encode({"name": "a", "tags": [1, 2]}) == '{"name":"a","tags":[1,2]}'

    def test_json_encode_keeps_unicode(self) -> None:
        assert json_encode({"city": "Zürich"}) == '{"city":"Zürich"}'

    def test_containers_not_shared(self) -> None:
        a = Request(method="GET", path="/")
        b = Request(method="GET", path="/")
        a.headers["X"] = "1"
        assert b.headers == {}


# ---------------------------------------------------------------------------
# Mutators
# ---------------------------------------------------------------------------


class TestMutators:
    def test_add_headers_merges(self) -> None:
        request = _make_request()
        request.add_headers({"X-Trace": "1"})
        assert request.headers == {"Accept": "application/json", "X-Trace": "1"}

    def test_set_headers_replaces(self) -> None:
        request = _make_request()
        request.set_headers({"X-Only": "1"})
        assert request.headers == {"X-Only": "1"}

    def test_query_parameter_mutators(self) -> None:
        request = _make_request()
        request.add_query_parameters({"page": 1})
        request.add_query_parameters({"size": 10})
        assert list(request.query_parameters.items()) == [("page", 1), ("size", 10)]
        request.set_query_parameters({"q": "x"})
        assert request.query_parameters == {"q": "x"}

    def test_scalar_setters(self) -> None:
        request = _make_request()
        signal = asyncio.Event()
        encoder = str
        decoder = str.upper

        request.set_body({"a": 1})
        request.set_encoder(encoder)
        request.set_decoder(decoder)
        request.set_path("/other")
        request.set_method("post")
        request.set_base_url("http://localhost")
        request.set_timeout(2.5)
        request.set_abort_signal(signal)

        assert request.body == {"a": 1}
        assert request.encoder is encoder
        assert request.decoder is decoder
        assert not request.uses_default_encoder
        assert request.path == "/other"
        assert request.method == "POST"
        assert request.base_url == "http://localhost"
        assert request.timeout == 2.5
        assert request.abort_signal is signal

    def test_set_method_rejects_unknown(self) -> None:
        request = _make_request()
        with pytest.raises(InvalidMethodError):
            request.set_method("HEAD")
        assert request.method == "GET"

    def test_mutators_return_none(self) -> None:
        request = _make_request()
        assert request.set_path("/x") is None


# ---------------------------------------------------------------------------
# merge
# ---------------------------------------------------------------------------


class TestRequestMerge:
    def test_headers_union_is_non_destructive(self) -> None:
        original = _make_request()
        merged = original.merge(headers={"X": "1"})
        assert merged is not original
        assert merged.headers == {"Accept": "application/json", "X": "1"}
        assert original.headers == {"Accept": "application/json"}

    def test_header_override(self) -> None:
        merged = _make_request().merge(headers={"Accept": "text/plain"})
        assert merged.headers == {"Accept": "text/plain"}

    def test_other_fields_replaced(self) -> None:
        original = _make_request(query_parameters={"a": 1})
        merged = original.merge(path="/x", query_parameters={"b": 2}, timeout=3)
        assert merged.path == "/x"
        assert merged.query_parameters == {"b": 2}
        assert merged.timeout == 3
        assert original.path == "/users"
        assert original.query_parameters == {"a": 1}

    def test_merge_copies_containers(self) -> None:
        original = _make_request(query_parameters={"a": 1})
        merged = original.merge(path="/x")
        merged.headers["New"] = "1"
        merged.query_parameters["b"] = 2
        merged.hooks.append(object())
        assert "New" not in original.headers
        assert original.query_parameters == {"a": 1}
        assert original.hooks == []

    def test_hooks_union_by_position(self) -> None:
        h1, h2, h3, h4 = object(), object(), object(), object()
        original = _make_request(hooks=[h1, h2])
        assert original.merge(hooks=[h3]).hooks == [h3, h2]
        assert original.merge(hooks=[h3, h4, h1]).hooks == [h3, h4, h1]
        assert original.hooks == [h1, h2]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(TypeError, match="bogus"):
            _make_request().merge(bogus=1)


class TestResult:
    def test_merge_headers_union(self) -> None:
        result = Result(status_code=200, headers={"a": "1"}, data={"x": 1})
        merged = result.merge(headers={"b": "2"})
        assert merged.headers == {"a": "1", "b": "2"}
        assert merged.data == {"x": 1}
        assert result.headers == {"a": "1"}

    def test_merge_replaces_data(self) -> None:
        result = Result(status_code=200, data=[1])
        merged = result.merge(data=[2], status_code=201)
        assert (merged.status_code, merged.data) == (201, [2])
        assert (result.status_code, result.data) == (200, [1])

    @pytest.mark.parametrize("status, ok", [(200, True), (204, True), (301, False), (404, False)])
    def test_ok(self, status: int, ok: bool) -> None:
        assert Result(status_code=status).ok is ok

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(TypeError):
            Result(status_code=200).merge(body=1)
