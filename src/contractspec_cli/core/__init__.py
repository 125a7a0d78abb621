"""Core utilities and configuration exports."""

from .config import ConfigError, default_track, load_workspace_config, locate_project_root
from .constants import CONFIG_FILENAME, CONTRACTSPEC_DIR, WORKFLOW_SUFFIXES, WORKFLOWS_DIR

__all__ = [
    "CONFIG_FILENAME",
    "CONTRACTSPEC_DIR",
    "WORKFLOWS_DIR",
    "WORKFLOW_SUFFIXES",
    "ConfigError",
    "default_track",
    "load_workspace_config",
    "locate_project_root",
]
