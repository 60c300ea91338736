"""Classify user functions and settle the promise-like values they return."""

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from runnable_core.errors import rejection_error

log = logging.getLogger(__name__)

POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class Mode(StrEnum):
    """How a function signals that it has finished."""

    SYNC = "sync"
    CALLBACK = "callback"


def detect_mode(fn: Callable[..., Any] | None) -> Mode:
    """Pick the completion style from the number of required positional args.

    Functions whose signature cannot be inspected (some builtins) are treated
    as synchronous.
    """
    if fn is None:
        return Mode.SYNC

    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return Mode.SYNC

    required = [
        param
        for param in signature.parameters.values()
        if param.kind in POSITIONAL_KINDS and param.default is param.empty
    ]
    return Mode.CALLBACK if required else Mode.SYNC


def is_thenable(value: object) -> bool:
    """Check for a callable ``then`` member, regardless of concrete type."""
    return callable(getattr(value, "then", None))


def is_promise_like(value: object) -> bool:
    """Thenables and native awaitables both count as promises."""
    return is_thenable(value) or inspect.isawaitable(value)


def settle(
    value: Any,
    on_fulfilled: Callable[[], None],
    on_rejected: Callable[[BaseException], None],
) -> None:
    """Register settlement handlers on a promise-like value.

    Thenables get ``then(fulfilled, rejected)``. Awaitables are scheduled on
    the running loop and reported when the resulting task finishes.
    """

    def fulfilled(_value: object = None, *_: object) -> None:
        on_fulfilled()

    def rejected(reason: object = None, *_: object) -> None:
        on_rejected(rejection_error(reason))

    if is_thenable(value):
        value.then(fulfilled, rejected)
        return

    future = asyncio.ensure_future(value)

    def finished(task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            rejected(asyncio.CancelledError())
        elif (exc := task.exception()) is not None:
            rejected(exc)
        else:
            fulfilled(task.result())

    future.add_done_callback(finished)
    log.debug("Awaiting %r", future)
