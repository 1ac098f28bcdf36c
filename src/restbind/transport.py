"""Transport boundary -- the single network-facing interface.

The invoker talks to any object satisfying the :class:`Transport` protocol.
:class:`HttpxTransport` is the default, backed by :class:`httpx.AsyncClient`;
tests (and callers) can swap in anything conforming, for example an
:class:`HttpxTransport` around an ``httpx.AsyncClient`` using
:class:`httpx.MockTransport`.

Deadlines are not the transport's concern: the invoker cancels the
in-flight call when the request's abort signal fires, so the default
transport disables httpx's own timeout.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from typing import Any, Optional, Protocol

import httpx

from restbind.body import FormData
from restbind.exceptions import TransportError

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Response(Protocol):
    """The subset of a response the invoker relies on."""

    status_code: int
    headers: Any

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class Transport(Protocol):
    """A fetch-like callable issuing one HTTP request."""

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> Response: ...


class HttpxTransport:
    """Default transport over :class:`httpx.AsyncClient`.

    Args:
        client: An existing client to send through. It is not closed by
            :meth:`aclose`.
        **client_kwargs: Forwarded to :class:`httpx.AsyncClient` when
            *client* is ``None``.

    Example::

        async with HttpxTransport(verify=False) as transport:
            api = create_client("https://api.example.com", resources, transport=transport)
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any) -> None:
        self._owns_client = client is None
        if client is None:
            client_kwargs.setdefault("timeout", None)
            client_kwargs.setdefault("follow_redirects", True)
            client = httpx.AsyncClient(**client_kwargs)
        self._client = client

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {
            "method": method,
            "url": url,
            "headers": dict(headers),
        }
        if isinstance(body, FormData):
            kwargs["data"] = body.fields
            kwargs["files"] = body.files or None
        elif isinstance(body, httpx.QueryParams):
            if not any(k.lower() == "content-type" for k in headers):
                kwargs["headers"]["Content-Type"] = _FORM_CONTENT_TYPE
            kwargs["content"] = str(body)
        elif isinstance(body, (bytearray, memoryview)):
            kwargs["content"] = bytes(body)
        elif isinstance(body, Iterator):
            kwargs["content"] = _aiter_bytes(body)
        elif body is not None:
            kwargs["content"] = body

        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(**kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response


async def _aiter_bytes(chunks: Iterator[bytes]) -> AsyncIterator[bytes]:
    # httpx.AsyncClient only streams async iterables.
    for chunk in chunks:
        yield chunk
