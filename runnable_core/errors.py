"""Errors reported by a runnable and helpers that normalize completion values."""

import dataclasses
from collections.abc import Mapping

from pydantic import BaseModel
from pydantic_core import to_json

MULTIPLE_DONE_MESSAGE = "done() called multiple times"
NO_REASON_MESSAGE = "Promise rejected with no or falsy reason"


class RunnableError(Exception):
    """Base class for errors synthesized by the execution core."""


class InvalidDurationError(RunnableError, ValueError):
    """Raised when a duration string cannot be parsed."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid duration: {value!r}")
        self.value = value


class MultipleDoneError(RunnableError):
    """The completion callback was invoked more than once."""

    def __init__(self, message: str = MULTIPLE_DONE_MESSAGE) -> None:
        super().__init__(message)

    @classmethod
    def from_error(cls, error: BaseException) -> "MultipleDoneError":
        """Derive the message from an error that was already reported."""
        exc = cls(f"{error} (and Mocha's {MULTIPLE_DONE_MESSAGE})")
        exc.__cause__ = error
        return exc


class NonErrorDoneError(RunnableError):
    """The completion callback received a truthy value that is not an exception."""

    def __init__(self, value: object) -> None:
        super().__init__(f"done() invoked with non-Error: {serialize_value(value)}")
        self.value = value


class PromiseRejectionError(RunnableError):
    """A promise-like value was rejected without an exception as its reason."""

    def __init__(self, message: str = NO_REASON_MESSAGE) -> None:
        super().__init__(message)


class TimeoutExceededError(RunnableError):
    """The runnable did not complete within its configured timeout."""

    def __init__(self, ms: int, file: str | None = None) -> None:
        message = (
            f"Timeout of {ms}ms exceeded. For async tests and hooks, ensure "
            '"done()" is called; if returning a Promise, ensure it resolves.'
        )
        if file:
            message += f" ({file})"
        super().__init__(message)
        self.ms = ms
        self.file = file


class OverspecifiedError(RunnableError):
    """A callback-style function also returned a promise-like value."""

    def __init__(self) -> None:
        super().__init__(
            "Resolution method is overspecified. "
            "Specify a callback *or* return a Promise; not both."
        )


class AsyncOnlyError(RunnableError):
    """A synchronous function ran while only asynchronous ones are allowed."""

    def __init__(self) -> None:
        super().__init__(
            "--async-only option in use without declaring `done()` "
            "or returning a promise"
        )


class NoEventLoopError(RunnableError):
    """A callback or promise run was started outside a running event loop."""

    def __init__(self) -> None:
        super().__init__(
            "Timeouts for callback and promise-returning functions need a "
            "running asyncio event loop; use execute() or run() from a coroutine"
        )


class Pending(Exception):  # noqa: N818
    """Control signal raised by ``skip()``; marks a run as skipped."""


def serialize_value(value: object) -> str:
    """Render a non-exception completion value for an error message.

    Mappings, dataclass instances and pydantic models are rendered as compact
    JSON; anything else falls back to ``str()``.
    """
    is_structured = (
        isinstance(value, Mapping | BaseModel)
        or (dataclasses.is_dataclass(value) and not isinstance(value, type))
    )
    if is_structured:
        return to_json(value, fallback=str).decode()
    return str(value)


def done_error(value: object) -> BaseException | None:
    """Normalize the argument passed to a completion callback."""
    if isinstance(value, BaseException):
        return value
    if value:
        return NonErrorDoneError(value)
    return None


def rejection_error(reason: object = None) -> BaseException:
    """Normalize the reason a promise-like value was rejected with."""
    if isinstance(reason, BaseException):
        return reason
    if reason:
        return PromiseRejectionError(
            f"Promise rejected with reason: {serialize_value(reason)}"
        )
    return PromiseRejectionError()
