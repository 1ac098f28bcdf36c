"""Shared test fixtures for restbind.

Provides a recording mock transport built on :class:`httpx.MockTransport`
and isolation of the ``RESTBIND_*`` environment variables. These fixtures
are automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx
import pytest

from restbind.transport import HttpxTransport


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear all RESTBIND_* environment variables for every test."""
    for var in [
        "RESTBIND_CONFIG",
        "RESTBIND_TIMEOUT",
        "RESTBIND_HEADERS",
        "RESTBIND_BASE_URL",
    ]:
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Mock transport
# ---------------------------------------------------------------------------


class Recorder:
    """Collects every request sent through a mock transport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]


def _default_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def mock_transport(recorder: Recorder) -> Callable[..., HttpxTransport]:
    """Factory building an :class:`HttpxTransport` over :class:`httpx.MockTransport`.

    The optional handler receives each :class:`httpx.Request` and returns
    the response; every request is also appended to the ``recorder``
    fixture.
    """

    def factory(
        handler: Optional[Callable[[httpx.Request], Any]] = None,
    ) -> HttpxTransport:
        respond = handler or _default_handler

        def recording_handler(request: httpx.Request) -> Any:
            recorder.requests.append(request)
            return respond(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        return HttpxTransport(client)

    return factory
