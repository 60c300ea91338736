"""Tests for runnable settings and the rc file loader."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from runnable_core.config_loader import load_runnable_config
from runnable_core.models.config import RunnableConfig
from runnable_core.testing.factories import RunnableConfigFactory


class TestRunnableConfig:
    """Tests for RunnableConfig."""

    def test_defaults(self) -> None:
        """Uses the framework baselines."""
        config = RunnableConfig()

        assert config.timeout == 2000
        assert config.slow == 75
        assert config.enable_timeouts is True
        assert config.globals == ()

    def test_parses_duration_strings(self) -> None:
        """Durations may be given as strings."""
        config = RunnableConfig(timeout="2m", slow="1s")

        assert config.timeout == 120_000
        assert config.slow == 1000

    def test_accepts_kebab_case_keys(self) -> None:
        """rc file spelling is accepted."""
        config = RunnableConfig.model_validate(
            {"allow-uncaught": True, "enable-timeouts": False}
        )

        assert config.allow_uncaught is True
        assert config.enable_timeouts is False

    def test_rejects_invalid_duration(self) -> None:
        """Bad duration strings fail validation."""
        with pytest.raises(ValidationError, match="Invalid duration"):
            RunnableConfig(timeout="soon")

    def test_rejects_negative_timeout(self) -> None:
        """Timeouts cannot be negative."""
        with pytest.raises(ValidationError):
            RunnableConfig(timeout=-1)

    def test_rejects_unknown_keys(self) -> None:
        """Typos are reported instead of ignored."""
        with pytest.raises(ValidationError):
            RunnableConfig.model_validate({"timout": 10})

    def test_is_frozen(self) -> None:
        """Settings cannot be mutated after validation."""
        config = RunnableConfigFactory.build()

        with pytest.raises(ValidationError):
            config.timeout = 1  # type: ignore[misc]


class TestLoadRunnableConfig:
    """Tests for load_runnable_config."""

    async def test_loads_yaml(self, tmp_path: Path) -> None:
        """Loads and validates a YAML rc file."""
        path = tmp_path / ".runnablerc.yml"
        path.write_text(
            """
timeout: 5s
slow: 150
retries: 2
async-only: true
globals:
  - window
"""
        )

        config = await load_runnable_config(path)

        assert config.timeout == 5000
        assert config.slow == 150
        assert config.retries == 2
        assert config.async_only is True
        assert list(config.globals) == ["window"]

    async def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        """An empty document yields defaults."""
        path = tmp_path / ".runnablerc.yml"
        path.write_text("")

        assert await load_runnable_config(path) == RunnableConfig()

    async def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            await load_runnable_config(tmp_path / "missing.yml")

    async def test_non_mapping_document(self, tmp_path: Path) -> None:
        """The document must be a mapping."""
        path = tmp_path / ".runnablerc.yml"
        path.write_text("- timeout\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            await load_runnable_config(path)
