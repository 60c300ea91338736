"""A single unit of test logic run once to a definitive outcome."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from enum import StrEnum
from functools import partial
from typing import Any, NoReturn, Self, TypeAlias, overload

from runnable_core.durations import to_milliseconds
from runnable_core.errors import (
    AsyncOnlyError,
    OverspecifiedError,
    Pending,
    TimeoutExceededError,
    done_error,
)
from runnable_core.events import EventEmitter
from runnable_core.guard import CompletionGuard
from runnable_core.invocation import Mode, detect_mode, is_promise_like, settle
from runnable_core.models.config import RunnableConfig
from runnable_core.models.outcome import Outcome
from runnable_core.suite import Parent
from runnable_core.timer import TimeoutController

log = logging.getLogger(__name__)

MAX_TIMEOUT = 2**31

Callback: TypeAlias = Callable[[BaseException | None], object]


class State(StrEnum):
    """Classification assigned by the runner once a run is reported."""

    PASSED = "passed"
    FAILED = "failed"


class Runnable(EventEmitter):
    """Runs a sync, callback-style or promise-returning function exactly once.

    Every path (return, ``done()``, promise settlement, timeout, raise) ends in
    one call of the callback given to ``run``. Extra completions are emitted as
    ``error`` events instead.
    """

    def __init__(
        self,
        title: str = "",
        fn: Callable[..., Any] | None = None,
        *,
        config: RunnableConfig | None = None,
        mode: Mode | None = None,
    ) -> None:
        super().__init__()
        self._title = title
        self.fn = fn
        self.mode = mode if mode is not None else detect_mode(fn)
        self.parent: Parent | None = None
        self.file: str | None = None
        self.pending = fn is None
        self.state: State | None = None
        self.duration: float | None = None
        self.timed_out = False
        self.allow_uncaught = False
        self.async_only = False
        self._timeout = 0
        self._slow = 0
        self._enable_timeouts = True
        self._retries = 0
        self._current_retry = 0
        self._globals: list[str] = []
        self._timer = TimeoutController(
            on_expire=self._on_timeout, is_enabled=lambda: self._enable_timeouts
        )
        self._guard: CompletionGuard | None = None
        self.configure(config or RunnableConfig())

    @property
    def title(self) -> str:
        """Title of this runnable without its parents."""
        return self._title

    @property
    def sync(self) -> bool:
        """Whether the function runs without a ``done`` callback."""
        return self.mode is Mode.SYNC

    @property
    def async_(self) -> int:
        """1 when the function takes a ``done`` callback, 0 otherwise."""
        return int(self.mode is Mode.CALLBACK)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(title={self._title!r}, mode={self.mode})"

    def configure(self, config: RunnableConfig) -> Self:
        """Apply every setting of ``config`` to this runnable."""
        self.enable_timeouts(config.enable_timeouts)
        self.timeout(config.timeout)
        self.slow(config.slow)
        self.retries(config.retries)
        self.globals(list(config.globals))
        self.allow_uncaught = config.allow_uncaught
        self.async_only = config.async_only
        return self

    @overload
    def timeout(self, ms: None = None) -> int: ...
    @overload
    def timeout(self, ms: int | float | str) -> Self: ...
    def timeout(self, ms: int | float | str | None = None) -> int | Self:
        """Get or set the timeout in milliseconds.

        Values of 2**31 or more, infinity included, cannot be scheduled and
        disable timeouts.

        Raises:
            ValueError: If the value is negative or not a number

        """
        if ms is None:
            return self._timeout

        value = _non_negative("timeout", ms)
        if value >= MAX_TIMEOUT:
            self._enable_timeouts = False
        log.debug("timeout %d", value)
        self._timeout = value
        if self._timer.armed:
            self.reset_timeout()
        return self

    @overload
    def slow(self, ms: None = None) -> int: ...
    @overload
    def slow(self, ms: int | float | str) -> Self: ...
    def slow(self, ms: int | float | str | None = None) -> int | Self:
        """Get or set the slow threshold in milliseconds.

        Raises:
            ValueError: If the value is negative or not a number

        """
        if ms is None:
            return self._slow

        value = _non_negative("slow", ms)
        log.debug("slow %d", value)
        self._slow = value
        return self

    @overload
    def enable_timeouts(self, enabled: None = None) -> bool: ...
    @overload
    def enable_timeouts(self, enabled: bool) -> Self: ...
    def enable_timeouts(self, enabled: bool | None = None) -> bool | Self:
        """Get or set whether the timeout is enforced."""
        if enabled is None:
            return self._enable_timeouts

        log.debug("enable_timeouts %s", enabled)
        self._enable_timeouts = enabled
        return self

    @overload
    def retries(self, n: None = None) -> int: ...
    @overload
    def retries(self, n: int) -> Self: ...
    def retries(self, n: int | None = None) -> int | Self:
        """Get or set how many times a failing run may be retried."""
        if n is None:
            return self._retries
        self._retries = n
        return self

    @overload
    def current_retry(self, n: None = None) -> int: ...
    @overload
    def current_retry(self, n: int) -> Self: ...
    def current_retry(self, n: int | None = None) -> int | Self:
        """Get or set the attempt number of the current run."""
        if n is None:
            return self._current_retry
        self._current_retry = n
        return self

    @overload
    def globals(self, names: None = None) -> Sequence[str]: ...
    @overload
    def globals(self, names: Sequence[str]) -> Self: ...
    def globals(self, names: Sequence[str] | None = None) -> Sequence[str] | Self:
        """Get or set the global names an external leak detector should allow."""
        if names is None:
            return self._globals
        self._globals = list(names)
        return self

    def title_path(self) -> Sequence[str]:
        """Titles from the outermost parent down to this runnable."""
        if self.parent is None:
            return [self._title]
        return [*self.parent.title_path(), self._title]

    def full_title(self) -> str:
        """Title path joined with spaces."""
        return " ".join(self.title_path())

    def is_pending(self) -> bool:
        """Whether this runnable or any of its parents is pending."""
        return self.pending or (self.parent is not None and self.parent.is_pending())

    def is_failed(self) -> bool:
        """Whether a non-pending run was classified as failed."""
        return not self.is_pending() and self.state is State.FAILED

    def is_passed(self) -> bool:
        """Whether a non-pending run was classified as passed."""
        return not self.is_pending() and self.state is State.PASSED

    def skip(self) -> NoReturn:
        """Stop the calling function and mark the run as skipped."""
        if self._guard is not None and not self._guard.finished:
            raise Pending("async skip; aborting execution")
        raise Pending("sync skip")

    def reset_timeout(self) -> None:
        """(Re)start the countdown using the current timeout settings."""
        self._timer.reset(self._timeout, self._enable_timeouts)

    def clear_timeout(self) -> None:
        """Cancel the countdown without reporting anything."""
        self._timer.clear()

    def run(self, callback: Callback) -> None:
        """Execute the function and report the outcome to ``callback`` once.

        ``callback`` receives None on success, a ``Pending`` instance when the
        run was skipped, or the exception describing the failure. Exceptions
        raised by ``callback`` itself propagate to the caller.

        Raises:
            Exception: Whatever the function raised synchronously, but only
                when ``allow_uncaught`` is set

        """
        start = time.perf_counter()
        self.timed_out = False
        guard = CompletionGuard(
            deliver=partial(self._finish, start, callback),
            on_multiple=partial(self.emit, "error"),
        )
        self._guard = guard

        if self.is_pending():
            log.debug("Skipping pending runnable %r", self._title)
            guard.complete()
            return

        log.debug("Running %r in %s mode", self._title, self.mode)
        returned: list[Any] = []
        try:
            if self.mode is Mode.CALLBACK:
                self.reset_timeout()
                result = self._invoke(self._done_callback(guard, returned))
            else:
                result = self._invoke()
        except Exception as exc:
            self._fail(guard, exc)
            return
        returned.append(result)

        if is_promise_like(result):
            if self.mode is Mode.CALLBACK:
                # the body of a coroutine only runs once it is scheduled
                self._settle(guard, result, on_fulfilled=lambda: None)
            else:
                self._settle(guard, result, on_fulfilled=guard.complete)
        elif self.mode is Mode.SYNC:
            guard.complete(AsyncOnlyError() if self.async_only else None)

    async def execute(self) -> Outcome:
        """Run on the current event loop and return the classified outcome."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[BaseException | None] = loop.create_future()

        def resolve(error: BaseException | None) -> None:
            if not future.done():
                future.set_result(error)

        pending = self.is_pending()
        self.run(resolve)
        error = await future
        return Outcome.from_error(
            error,
            duration=self.duration or 0.0,
            timed_out=self.timed_out,
            pending=pending,
        )

    def _invoke(self, *args: object) -> object:
        return self.fn(*args) if self.fn is not None else None

    def _done_callback(
        self, guard: CompletionGuard, returned: list[Any]
    ) -> Callable[..., None]:
        def done(value: object = None, *_: object) -> None:
            error = done_error(value)
            if error is None and returned and is_promise_like(returned[0]):
                error = OverspecifiedError()
            guard.complete(error)

        return done

    def _settle(
        self,
        guard: CompletionGuard,
        result: object,
        on_fulfilled: Callable[[], object],
    ) -> None:
        try:
            if self.mode is Mode.SYNC:
                self.reset_timeout()
            settle(result, on_fulfilled=on_fulfilled, on_rejected=guard.complete)
        except Exception as exc:
            self._fail(guard, exc)

    def _fail(self, guard: CompletionGuard, exc: Exception) -> None:
        if guard.finished:
            # raised after delivery, e.g. by the runner's own callback
            log.error(
                "%r raised after reporting its outcome: %s",
                self._title,
                exc,
                exc_info=exc,
            )
            guard.complete(exc)
            return

        if self.allow_uncaught and not isinstance(exc, Pending):
            self._timer.clear()
            raise exc
        guard.suppress_multiple()
        guard.complete(exc)

    def _finish(
        self, start: float, callback: Callback, error: BaseException | None
    ) -> None:
        self._timer.clear()
        self.duration = (time.perf_counter() - start) * 1000
        ms = self._timeout
        if error is None and self._enable_timeouts and ms and self.duration > ms:
            error = TimeoutExceededError(ms, self.file)
        callback(error)

    def _on_timeout(self, ms: int) -> None:
        if self._guard is not None:
            self._guard.expire(TimeoutExceededError(ms, self.file))
        self.timed_out = True


def _non_negative(name: str, ms: int | float | str) -> int:
    value = to_milliseconds(ms)
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {ms!r}")
    return value
