"""Configuration layer merging.

A call's effective headers, timeout and hooks come from up to three layers:
the client-wide options (global), the resource, and the structured route
descriptor (request). Each layer is a :class:`Scope`.

Precedence:
    * headers -- shallow merge global -> resource -> request, later wins;
    * timeout -- first value set, checked request -> resource -> global;
    * hooks -- concatenated global -> resource -> request, never overridden.

Header keys are compared case-sensitively: ``"content-type"`` and
``"Content-Type"`` are distinct keys and both survive the merge. HTTP header
names are case-insensitive on the wire, so callers should pick one spelling
per header across all layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence


@dataclass(frozen=True)
class Scope:
    """One configuration layer. Built once and shared read-only across calls."""

    headers: Mapping[str, str] = field(default_factory=dict)
    hooks: Sequence[Any] = ()
    timeout: Optional[float] = None


def merge_headers(*layers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Shallow-merge header maps in order; later layers win on equal keys.

    ``None`` layers are skipped. Always returns a new dict.
    """
    merged: dict[str, str] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


def resolve_timeout(*candidates: Optional[float]) -> Optional[float]:
    """Return the first candidate that is not ``None``.

    Pass candidates highest-precedence first (request, resource, global).
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def chain_hooks(*layers: Optional[Sequence[Any]]) -> list[Any]:
    """Concatenate hook lists in precedence order (global, resource, request)."""
    chained: list[Any] = []
    for layer in layers:
        if layer:
            chained.extend(layer)
    return chained
