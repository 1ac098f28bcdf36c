"""Exception hierarchy for restbind.

All exceptions inherit from :class:`RestbindError`. Every failure of a bound
route call surfaces as one of these (or as an exception raised by a hook or
a custom transport, which propagates unchanged) from the awaited call.

Subclass hierarchy::

    RestbindError
    +-- InvalidMethodError   unknown HTTP verb in a route descriptor
    +-- DecodeError          response body could not be decoded
    +-- TransportError       network-level failure in the default transport
    +-- CancellationError    timeout or explicit abort fired first
    +-- HookError            a hook broke the pipeline contract
    +-- ConfigError          invalid options, resources or config files
"""

from __future__ import annotations

from typing import Optional


class RestbindError(Exception):
    """Base exception for all restbind errors."""


class InvalidMethodError(RestbindError):
    """Raised when a route names an HTTP method outside GET/POST/PUT/DELETE/PATCH.

    Args:
        token: The offending method token, uppercased.
        route: The full route string that was being decoded.
    """

    def __init__(self, token: str, route: str):
        super().__init__(f"Invalid HTTP method: {token} at route: {route}")
        self.token = token
        self.route = route


class DecodeError(RestbindError):
    """Raised when the response body fails to parse under the active decoder.

    The underlying parse exception is chained as ``__cause__``.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the response that failed to decode.
        text: The raw response text, when it could be read.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        text: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.text = text


class TransportError(RestbindError):
    """Raised on network-level failures (DNS resolution, connection refused, protocol errors)."""


class CancellationError(RestbindError):
    """Raised when the abort signal fires before the call completes.

    Args:
        message: Human-readable error description.
        timeout: The timeout in seconds when the signal was synthesized
            from a timeout, otherwise ``None``.
    """

    def __init__(self, message: str, timeout: Optional[float] = None):
        super().__init__(message)
        self.timeout = timeout


class HookError(RestbindError):
    """Raised when a hook violates the pipeline contract (e.g. returns ``None``)."""


class ConfigError(RestbindError):
    """Raised for configuration problems (invalid options, resources, or config files)."""
