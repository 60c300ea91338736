"""Completion guard making a run report its outcome exactly once."""

import logging
from collections.abc import Callable
from typing import TypeAlias

from runnable_core.errors import MultipleDoneError

log = logging.getLogger(__name__)

Deliver: TypeAlias = Callable[[BaseException | None], None]


class CompletionGuard:
    """Wraps the delivery of one run's outcome.

    The first call to ``complete`` or ``expire`` is delivered. Later calls to
    ``complete`` are turned into a single ``MultipleDoneError`` handed to
    ``on_multiple``; calls arriving after ``expire`` are discarded silently.
    """

    def __init__(
        self,
        deliver: Deliver,
        on_multiple: Callable[[BaseException], object],
    ) -> None:
        self._deliver = deliver
        self._on_multiple = on_multiple
        self._finished = False
        self._expired = False
        self._reported = False
        self._error: BaseException | None = None

    @property
    def finished(self) -> bool:
        """Whether an outcome has been delivered."""
        return self._finished

    @property
    def expired(self) -> bool:
        """Whether the delivered outcome was a timeout."""
        return self._expired

    def complete(self, error: BaseException | None = None) -> None:
        """Report the natural completion of the run."""
        if self._expired:
            log.debug("Ignoring completion after timeout: %r", error)
            return

        if self._finished:
            self._multiple(error)
            return

        self._finished = True
        self._error = error
        self._deliver(error)

    def expire(self, error: BaseException) -> None:
        """Report a timeout; wins over every later completion."""
        if self._finished:
            return

        self._finished = True
        self._expired = True
        self._error = error
        self._deliver(error)

    def suppress_multiple(self) -> None:
        """Stop emitting extra completions; errors they carry are logged instead."""
        self._reported = True

    def _multiple(self, error: BaseException | None) -> None:
        if self._reported:
            if error is not None:
                log.error(
                    "Dropping error reported after completion: %s",
                    error,
                    exc_info=error,
                )
            return
        self._reported = True

        cause = self._error or error
        if cause is not None and str(cause):
            exc = MultipleDoneError.from_error(cause)
        else:
            exc = MultipleDoneError()
        self._on_multiple(exc)
