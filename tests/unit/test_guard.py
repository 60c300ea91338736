"""Tests for the completion guard."""

import logging

import pytest

from runnable_core.errors import MultipleDoneError
from runnable_core.guard import CompletionGuard


@pytest.fixture
def delivered() -> list[BaseException | None]:
    """Values handed to the wrapped callback."""
    return []


@pytest.fixture
def extra() -> list[BaseException]:
    """Errors reported for extra completions."""
    return []


@pytest.fixture
def guard(
    delivered: list[BaseException | None], extra: list[BaseException]
) -> CompletionGuard:
    """Create a guard recording deliveries and extra calls."""
    return CompletionGuard(deliver=delivered.append, on_multiple=extra.append)


def test_delivers_first_completion(
    guard: CompletionGuard, delivered: list[BaseException | None]
) -> None:
    """Passes the first completion through."""
    guard.complete()

    assert delivered == [None]
    assert guard.finished


def test_reports_plain_message_without_errors(
    guard: CompletionGuard,
    delivered: list[BaseException | None],
    extra: list[BaseException],
) -> None:
    """Extra successful completions get the generic message."""
    guard.complete()
    guard.complete()

    assert delivered == [None]
    assert [str(e) for e in extra] == ["done() called multiple times"]


def test_derives_message_from_first_error(
    guard: CompletionGuard, extra: list[BaseException]
) -> None:
    """The first error wins over the extra call's error."""
    first = ValueError("first")
    guard.complete(first)
    guard.complete(ValueError("second"))

    (error,) = extra
    assert isinstance(error, MultipleDoneError)
    assert str(error) == "first (and Mocha's done() called multiple times)"
    assert error.__cause__ is first


def test_uses_extra_error_when_first_succeeded(
    guard: CompletionGuard, extra: list[BaseException]
) -> None:
    """An error on the extra call is used when the first had none."""
    guard.complete()
    guard.complete(ValueError("late"))

    assert str(extra[0]) == "late (and Mocha's done() called multiple times)"


def test_reports_only_first_extra_call(
    guard: CompletionGuard, extra: list[BaseException]
) -> None:
    """Later extra calls are dropped."""
    guard.complete()
    for _ in range(3):
        guard.complete()

    assert len(extra) == 1


def test_expire_discards_later_completions(
    guard: CompletionGuard,
    delivered: list[BaseException | None],
    extra: list[BaseException],
) -> None:
    """Completions after a timeout are neither delivered nor reported."""
    timeout = TimeoutError("late")
    guard.expire(timeout)
    guard.complete()
    guard.complete(ValueError("boom"))

    assert delivered == [timeout]
    assert extra == []
    assert guard.expired


def test_expire_after_completion_is_ignored(
    guard: CompletionGuard, delivered: list[BaseException | None]
) -> None:
    """A natural completion cannot be overridden by a timeout."""
    guard.complete()
    guard.expire(TimeoutError("late"))

    assert delivered == [None]
    assert not guard.expired


def test_suppress_multiple(
    guard: CompletionGuard, extra: list[BaseException]
) -> None:
    """Extra calls are silent once suppressed."""
    guard.suppress_multiple()
    guard.complete(ValueError("raised"))
    guard.complete()

    assert extra == []


def test_suppressed_error_is_logged(
    guard: CompletionGuard,
    extra: list[BaseException],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Errors dropped under suppression still reach the log."""
    guard.suppress_multiple()
    guard.complete()

    with caplog.at_level(logging.ERROR):
        guard.complete(RuntimeError("runner bug"))

    assert extra == []
    assert "Dropping error reported after completion: runner bug" in caplog.text
