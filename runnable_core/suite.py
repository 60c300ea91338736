"""Parent interface a runnable reads its title path from."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


class Parent(Protocol):
    """Anything a runnable can be nested under."""

    def title_path(self) -> Sequence[str]:
        """Titles from the outermost ancestor down to this one."""
        ...

    def is_pending(self) -> bool:
        """Whether this parent or any of its ancestors is pending."""
        ...


@dataclass(kw_only=True)
class Suite:
    """Minimal grouping of runnables.

    The root suite contributes no title to the path.
    """

    title: str = ""
    parent: Parent | None = None
    pending: bool = False
    root: bool = False

    def title_path(self) -> Sequence[str]:
        """Titles of the enclosing suites and this one, skipping the root."""
        path = list(self.parent.title_path()) if self.parent is not None else []
        if not self.root:
            path.append(self.title)
        return path

    def full_title(self) -> str:
        """Title path joined with spaces."""
        return " ".join(self.title_path())

    def is_pending(self) -> bool:
        """Whether this suite or any of its parents is pending."""
        return self.pending or (self.parent is not None and self.parent.is_pending())
