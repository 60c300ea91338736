"""Base model configuration for all settings structures."""

from pydantic import BaseModel, ConfigDict


def to_kebab(name: str) -> str:
    """Convert a snake_case field name to the kebab-case used by rc files."""
    return name.replace("_", "-")


class Model(BaseModel):
    """Frozen model accepting both snake_case and kebab-case keys."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_kebab,
        validate_by_alias=True,
        validate_by_name=True,
    )
