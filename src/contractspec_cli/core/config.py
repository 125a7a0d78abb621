"""Workspace configuration for ContractSpec projects.

The configuration is stored in ``.contractsrc.json`` at the project root.
The CLI forwards it untouched to workflow steps; only the ``vibe`` section is
read here, to pick the default track.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from contractspec_cli.core.constants import CONFIG_FILENAME, CONTRACTSPEC_DIR
from contractspec_cli.vibe.models import Track

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when .contractsrc.json cannot be parsed or validated."""


def locate_project_root(start: Path | None = None) -> Path:
    """Walk up from *start* to the nearest ContractSpec project root.

    A directory qualifies when it holds ``.contractsrc.json`` or a
    ``.contractspec/`` directory. Falls back to *start* when nothing matches.
    """
    origin = (start or Path.cwd()).resolve()
    for candidate in (origin, *origin.parents):
        if (candidate / CONFIG_FILENAME).is_file() or (candidate / CONTRACTSPEC_DIR).is_dir():
            return candidate
    return origin


def load_workspace_config(root: Path) -> dict[str, Any]:
    """Load workspace configuration from .contractsrc.json.

    Args:
        root: Project root directory

    Returns:
        Parsed configuration mapping (empty if the file does not exist)
    """
    config_file = root / CONFIG_FILENAME

    if not config_file.exists():
        logger.debug(f"Config file not found: {config_file}")
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load config: {e}")
        raise ConfigError(f"Invalid JSON in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {config_file}: expected a JSON object at the top level")

    return data


def default_track(config: Any) -> Track:
    """Return the track configured under ``vibe.track`` (``product`` if unset)."""
    section = config.get("vibe") if isinstance(config, dict) else None
    if not isinstance(section, dict) or section.get("track") is None:
        return Track.PRODUCT

    try:
        return Track.parse(section["track"])
    except ValueError as e:
        raise ConfigError(f"Invalid vibe.track in {CONFIG_FILENAME}: {e}") from e


__all__ = [
    "ConfigError",
    "default_track",
    "load_workspace_config",
    "locate_project_root",
]
