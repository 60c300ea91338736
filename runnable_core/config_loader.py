"""Load runnable settings from YAML rc files."""

import asyncio
import logging
from pathlib import Path

import yaml

from runnable_core.models.config import RunnableConfig

log = logging.getLogger(__name__)


async def load_runnable_config(path: Path) -> RunnableConfig:
    """Load and validate a runnable rc file.

    Args:
        path: Path to a YAML file such as ``.runnablerc.yml``

    Returns:
        Validated settings; an empty file yields the defaults

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a mapping
        pydantic.ValidationError: If a setting is invalid

    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    content = await asyncio.to_thread(path.read_text)
    data = yaml.safe_load(content)
    if data is None:
        log.info("Config file %s is empty, using defaults", path)
        return RunnableConfig()

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    log.info("Loaded runnable config from %s", path)
    return RunnableConfig.model_validate(data)
