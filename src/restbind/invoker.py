"""Transport invocation -- turns a hook-processed Request into a Result.

Steps, in order:

1. :func:`build_url` -- ``base_url + prefix + path`` plus query parameters
   appended in insertion order.
2. :func:`encode_body` -- passthrough bodies go out as-is, anything else
   through the request's encoder.
3. :func:`resolve_signal` -- the explicit abort signal, or one synthesized
   from the timeout, or none.
4. The transport call and the response decode run together under that
   signal; if it fires first the in-flight work is cancelled and
   :class:`~restbind.exceptions.CancellationError` is raised.

:func:`apply_default_content_type` runs between the before-request hooks
and :func:`invoke`, so a hook installing its own encoder or Content-Type
suppresses the JSON default.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Mapping, Optional

import httpx

from restbind.body import is_passthrough
from restbind.exceptions import CancellationError, DecodeError
from restbind.request import Request, Result
from restbind.transport import Response, Transport

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


# --- URL and body ---


def stringify_query_value(value: Any) -> str:
    """Render a query value; booleans as ``true``/``false``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(
    base_url: str,
    prefix: Optional[str],
    path: str,
    query_parameters: Optional[Mapping[str, Any]] = None,
) -> str:
    """Build the full request URL.

    Query parameters are appended after any already present in *path*, in
    the mapping's iteration (insertion) order.
    """
    url = httpx.URL(f"{base_url}{prefix or ''}{path}")
    if query_parameters:
        pairs = list(url.params.multi_items())
        pairs.extend((key, stringify_query_value(value)) for key, value in query_parameters.items())
        url = url.copy_with(params=httpx.QueryParams(pairs))
    return str(url)


def encode_body(request: Request) -> Any:
    """Return the wire body: ``None``, the passthrough value, or encoder output."""
    body = request.body
    if body is None or is_passthrough(body):
        return body
    return request.encoder(body)


def apply_default_content_type(request: Request) -> Request:
    """Add ``Content-Type: application/json`` when the JSON encoder is in use.

    Applies if and only if the encoder is the default one and no
    ``Content-Type`` header is present (case-sensitive key). The body kind
    is not consulted: a raw or form body sent with the default encoder
    still gets the JSON type unless a header or encoder says otherwise.
    Returns a new request when the header is added.
    """
    if request.uses_default_encoder and not request.has_header("Content-Type"):
        return request.merge(headers={"Content-Type": JSON_CONTENT_TYPE})
    return request


# --- Cancellation ---


class _Deadline:
    """An abort signal that fires itself after *timeout* seconds."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self.event = asyncio.Event()
        self._handle = asyncio.get_running_loop().call_later(timeout, self.event.set)

    def is_set(self) -> bool:
        return self.event.is_set()

    async def wait(self) -> bool:
        return await self.event.wait()

    def cancel(self) -> None:
        self._handle.cancel()


def resolve_signal(request: Request) -> Any:
    """Pick the abort signal for *request*.

    The explicit ``abort_signal`` wins; otherwise a positive timeout
    synthesizes one; otherwise there is no deadline and ``None`` is
    returned. A timeout of ``0`` means no deadline. Must be called from
    inside the running event loop.
    """
    if request.abort_signal is not None:
        return request.abort_signal
    if request.timeout:
        return _Deadline(request.timeout)
    return None


def _cancellation_error(request: Request, signal: Any) -> CancellationError:
    if isinstance(signal, _Deadline):
        return CancellationError(
            f"{request.method} {request.path} timed out after {signal.timeout}s",
            timeout=signal.timeout,
        )
    return CancellationError(f"{request.method} {request.path} was aborted")


async def _run_under_signal(work: Any, signal: Any, request: Request) -> Result:
    if signal is None:
        return await work
    if signal.is_set():
        work.close()
        raise _cancellation_error(request, signal)

    task = asyncio.ensure_future(work)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()
        if isinstance(signal, _Deadline):
            signal.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise _cancellation_error(request, signal)


# --- Transport call and decoding ---


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def decode_response(request: Request, response: Response) -> Any:
    """Decode *response* with the request's decoder.

    The default JSON decoder uses ``response.json()``; custom decoders
    receive ``response.text``. An empty body is not valid JSON, so routes
    answering ``204`` need a decoder that tolerates it.

    Raises:
        DecodeError: If reading or decoding the body fails.
    """
    text: Optional[str] = None
    try:
        text = await _maybe_await(response.text)
        if request.uses_default_decoder:
            return await _maybe_await(response.json())
        return request.decoder(text)
    except Exception as exc:
        raise DecodeError(
            f"Failed to decode response from {request.method} {request.path}: {exc}",
            status_code=response.status_code,
            text=text,
        ) from exc


async def _send(request: Request, transport: Transport, url: str, body: Any) -> Result:
    response = await transport(
        url,
        method=request.method,
        headers=request.headers,
        body=body,
    )
    data = await decode_response(request, response)
    return Result(
        status_code=response.status_code,
        headers=dict(response.headers),
        data=data,
    )


async def invoke(request: Request, transport: Transport, prefix: Optional[str] = None) -> Result:
    """Send *request* through *transport* and decode the response.

    Args:
        request: The fully hook-processed request.
        transport: The transport callable.
        prefix: The resource prefix inserted between base URL and path.

    Returns:
        A new :class:`~restbind.request.Result`.

    Raises:
        CancellationError: If the abort signal or timeout fires first.
        DecodeError: If the response body cannot be decoded.
    """
    url = build_url(request.base_url, prefix, request.path, request.query_parameters)
    body = encode_body(request)
    signal = resolve_signal(request)
    logger.debug("Invoking %s %s (timeout=%s)", request.method, url, request.timeout)
    return await _run_under_signal(_send(request, transport, url, body), signal, request)
