"""Countdown that forces a run to time out on the asyncio event loop."""

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum

from runnable_core.errors import NoEventLoopError

log = logging.getLogger(__name__)


class TimerState(StrEnum):
    """Lifecycle of a single countdown."""

    IDLE = "idle"
    ARMED = "armed"
    FIRED = "fired"
    CLEARED = "cleared"


class TimeoutController:
    """Arms, re-arms and cancels one runnable's timeout.

    ``on_expire`` receives the limit in milliseconds that elapsed.
    ``is_enabled`` is consulted again at expiry so that timeouts disabled
    while armed never fire.
    """

    def __init__(
        self,
        on_expire: Callable[[int], None],
        is_enabled: Callable[[], bool],
    ) -> None:
        self._on_expire = on_expire
        self._is_enabled = is_enabled
        self._handle: asyncio.TimerHandle | None = None
        self.state = TimerState.IDLE

    @property
    def armed(self) -> bool:
        """Whether a countdown is currently scheduled."""
        return self.state is TimerState.ARMED

    def reset(self, ms: int, enabled: bool) -> None:
        """Restart the countdown with ``ms``; a no-op when disabled or zero.

        Raises:
            NoEventLoopError: If a countdown is needed outside a running loop

        """
        self.clear()
        if not enabled or ms <= 0:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise NoEventLoopError() from exc
        self._handle = loop.call_later(ms / 1000, self._expire, ms)
        self.state = TimerState.ARMED
        log.debug("Timeout armed for %dms", ms)

    def clear(self) -> None:
        """Cancel a pending countdown so it can no longer fire."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self.state is TimerState.ARMED:
            self.state = TimerState.CLEARED

    def _expire(self, ms: int) -> None:
        self._handle = None
        if not self._is_enabled():
            self.state = TimerState.CLEARED
            log.debug("Timeout of %dms elapsed while disabled", ms)
            return

        self.state = TimerState.FIRED
        log.debug("Timeout of %dms exceeded", ms)
        self._on_expire(ms)
