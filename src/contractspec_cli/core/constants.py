"""Shared path constants for ContractSpec project layout."""

from __future__ import annotations

CONTRACTSPEC_DIR = ".contractspec"
WORKFLOWS_DIR = "workflows"
CONFIG_FILENAME = ".contractsrc.json"
WORKFLOW_SUFFIXES = (".json", ".yaml", ".yml")

__all__ = ["CONTRACTSPEC_DIR", "WORKFLOWS_DIR", "CONFIG_FILENAME", "WORKFLOW_SUFFIXES"]
