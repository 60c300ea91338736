"""Minimal observer list used for out-of-band runnable notifications."""

import logging
from collections.abc import Callable
from typing import Any, Self, TypeAlias

log = logging.getLogger(__name__)

Listener: TypeAlias = Callable[..., Any]


class EventEmitter:
    """Per-instance subscription point, e.g. ``runnable.on("error", handler)``."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Self:
        """Subscribe ``listener`` to ``event``."""
        self._listeners.setdefault(event, []).append(listener)
        return self

    def off(self, event: str, listener: Listener) -> Self:
        """Remove a previously registered listener, if present."""
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)
        return self

    def listener_count(self, event: str) -> int:
        """Number of listeners registered for ``event``."""
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of ``event`` in subscription order.

        Returns:
            True if at least one listener was called

        """
        listeners = list(self._listeners.get(event, []))
        if not listeners:
            if event == "error":
                log.warning("Unhandled 'error' event: %s", args[0] if args else None)
            return False

        for listener in listeners:
            listener(*args)
        return True
