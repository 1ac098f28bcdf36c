"""Hook definitions and the runner for the before/after request pipeline.

This module provides three components:

* :class:`Hook` -- Base class for interceptors. A hook may define
  ``before_request(request)`` and/or ``after_request(request, result)``;
  both are optional and hooks lacking one are skipped for that stage.
* :class:`FunctionHook` -- Wraps plain callables so a hook can be declared
  without subclassing (see :func:`hook`).
* :class:`HookRunner` -- Folds a working :class:`~restbind.request.Request`
  or :class:`~restbind.request.Result` through the hooks in order.

The hook chain follows a pipeline pattern: each hook receives the output of
the previous one. The after stage runs in the same order as the before
stage. Exceptions raised by a hook propagate unchanged and abort the call;
changes earlier hooks made stand.

Example::

    class TraceHook(Hook):
        def before_request(self, request):
            return request.merge(headers={"X-Trace": "1"})
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from restbind.exceptions import HookError
from restbind.request import Request, Result

logger = logging.getLogger(__name__)

BeforeRequest = Callable[[Request], Any]
AfterRequest = Callable[[Request, Result], Any]


class Hook:
    """Base class for request interceptors.

    Subclasses implement ``before_request`` and/or ``after_request``.
    Either may be a coroutine function. Subclassing is optional: any object
    exposing one of the two methods can be used as a hook.

    * ``before_request(request) -> Request`` -- returns the request passed
      to the next hook (and finally to the transport).
    * ``after_request(request, result) -> Result`` -- receives the final
      request and the current result; returns the result passed on.
    """

    @property
    def name(self) -> str:
        """Name used in log records. Defaults to the class name."""
        return type(self).__name__


@dataclass
class FunctionHook(Hook):
    """A hook built from plain callables.

    A stage left as ``None`` is skipped by :class:`HookRunner`. *name*
    defaults to the class name, as for other hooks.
    """

    before_request: Optional[BeforeRequest] = None
    after_request: Optional[AfterRequest] = None
    name: Optional[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.name is None:
            self.name = type(self).__name__


def hook(
    before_request: Optional[BeforeRequest] = None,
    after_request: Optional[AfterRequest] = None,
    name: Optional[str] = None,
) -> FunctionHook:
    """Build a :class:`FunctionHook` from callables."""
    return FunctionHook(before_request=before_request, after_request=after_request, name=name)


def _hook_name(h: Any) -> str:
    return getattr(h, "name", None) or type(h).__name__


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class HookRunner:
    """Executes hooks in the order given.

    Holds an immutable snapshot of the hook list at creation time.
    """

    def __init__(self, hooks: Sequence[Any]) -> None:
        self._hooks = tuple(hooks)

    @property
    def hooks(self) -> tuple[Any, ...]:
        return self._hooks

    async def run_before(self, request: Request) -> Request:
        """Fold *request* through every ``before_request`` hook.

        Raises:
            HookError: If a hook returns ``None`` instead of a request.
        """
        for h in self._hooks:
            before = getattr(h, "before_request", None)
            if before is None:
                continue
            logger.debug("before_request hook %s", _hook_name(h))
            result = await _resolve(before(request))
            if result is None:
                raise HookError(f"Hook '{_hook_name(h)}' before_request returned None")
            request = result
        return request

    async def run_after(self, request: Request, result: Result) -> Result:
        """Fold *result* through every ``after_request`` hook.

        Raises:
            HookError: If a hook returns ``None`` instead of a result.
        """
        for h in self._hooks:
            after = getattr(h, "after_request", None)
            if after is None:
                continue
            logger.debug("after_request hook %s", _hook_name(h))
            replaced = await _resolve(after(request, result))
            if replaced is None:
                raise HookError(f"Hook '{_hook_name(h)}' after_request returned None")
            result = replaced
        return result
