"""Promise-like doubles that settle through the event loop."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

_MISSING = object()


@dataclass(kw_only=True)
class ScheduledThenable:
    """Thenable that fulfils or rejects on the next loop iteration.

    With neither ``value`` nor ``reason`` set it fulfils without a value.
    ``reject`` without a ``reason`` rejects with no argument at all.
    """

    value: object = _MISSING
    reason: object = _MISSING
    reject: bool = False
    then_calls: list[tuple[Callable[..., object], Callable[..., object]]] = field(
        default_factory=list
    )

    def then(
        self,
        fulfilled: Callable[..., object],
        rejected: Callable[..., object],
    ) -> None:
        self.then_calls.append((fulfilled, rejected))
        loop = asyncio.get_running_loop()
        if self.reject:
            args = () if self.reason is _MISSING else (self.reason,)
            loop.call_soon(rejected, *args)
        else:
            args = () if self.value is _MISSING else (self.value,)
            loop.call_soon(fulfilled, *args)


class ForeverPendingThenable:
    """Thenable that never settles."""

    def then(self, *_: object) -> None:
        return None


@dataclass(frozen=True)
class NotAThenable:
    """Object whose ``then`` attribute is not callable."""

    then: str = "i ran my tests"
