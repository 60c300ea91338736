"""Models for the terminal result of a run."""

from dataclasses import dataclass
from typing import Literal

from runnable_core.errors import Pending, TimeoutExceededError


@dataclass(frozen=True, kw_only=True)
class Outcome:
    """Result of a single run.

    ``error`` is set only for failures and timeouts; a skip carries no error.
    """

    status: Literal["success", "failure", "timeout", "skip"]
    duration: float
    error: BaseException | None = None

    @classmethod
    def from_error(
        cls,
        error: BaseException | None,
        *,
        duration: float,
        timed_out: bool = False,
        pending: bool = False,
    ) -> "Outcome":
        """Classify the value handed to a run's completion callback.

        A run of a pending runnable reports no error but is still a skip.
        """
        if error is None and not pending:
            return cls(status="success", duration=duration)
        if error is None or isinstance(error, Pending):
            return cls(status="skip", duration=duration)
        if timed_out or isinstance(error, TimeoutExceededError):
            return cls(status="timeout", duration=duration, error=error)
        return cls(status="failure", duration=duration, error=error)

    @property
    def passed(self) -> bool:
        """Whether the run succeeded."""
        return self.status == "success"

    @property
    def skipped(self) -> bool:
        """Whether the run was skipped."""
        return self.status == "skip"
