"""Settings applied to a runnable, loadable from rc files."""

from collections.abc import Sequence

from pydantic import Field, field_validator

from runnable_core.durations import to_milliseconds
from runnable_core.models.base import Model

DEFAULT_TIMEOUT = 2000
DEFAULT_SLOW = 75


class RunnableConfig(Model):
    """Execution settings for a runnable."""

    timeout: int = Field(
        default=DEFAULT_TIMEOUT,
        ge=0,
        description="Timeout in milliseconds or as a duration ('2s'); 0 disables",
    )
    slow: int = Field(
        default=DEFAULT_SLOW,
        ge=0,
        description="Slow threshold in milliseconds or as a duration ('75ms')",
    )
    retries: int = Field(default=0, ge=0, description="Number of retries allowed")
    enable_timeouts: bool = Field(default=True, description="Whether timeouts apply")
    allow_uncaught: bool = Field(
        default=False,
        description="Let synchronous exceptions propagate out of run()",
    )
    async_only: bool = Field(
        default=False,
        description="Require a done() callback or a returned promise",
    )
    globals: Sequence[str] = Field(
        default_factory=tuple,
        description="Global names whitelisted for leak detection",
    )

    @field_validator("timeout", "slow", mode="before")
    @classmethod
    def parse_durations(cls, value: object) -> object:
        """Accept duration strings such as '1s' or '2m'."""
        if isinstance(value, str):
            return to_milliseconds(value)
        return value
