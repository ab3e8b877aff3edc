"""Resolve where side-context keeps its files.

Layout (all relative to the base directory):

    entries/
        entry_00001.json     # one record per file
    active.json              # active-entry pointer (absent = no active entry)
    views/
        active-entry.md      # regenerated Markdown view
    config.toml              # optional settings

Nothing here touches the filesystem; directories are created lazily by the
writers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

SIDE_CONTEXT_HOME_ENV = "SIDE_CONTEXT_MCP_HOME"
_DEFAULT_HOME_DIR = ".side-context-mcp"

_ENTRIES_DIR = "entries"
_ACTIVE_FILE = "active.json"
_VIEWS_DIR = "views"
_ACTIVE_ENTRY_VIEW = "active-entry.md"


def resolve_base_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the storage root: $SIDE_CONTEXT_MCP_HOME, or ~/.side-context-mcp when unset/blank."""
    environ = os.environ if env is None else env
    override = environ.get(SIDE_CONTEXT_HOME_ENV)
    if override and override.strip():
        return Path(override).resolve()
    return Path.home() / _DEFAULT_HOME_DIR


def resolve_entries_dir(base_dir: Path | None = None) -> Path:
    return (base_dir or resolve_base_dir()) / _ENTRIES_DIR


def resolve_active_file(base_dir: Path | None = None) -> Path:
    return (base_dir or resolve_base_dir()) / _ACTIVE_FILE


def resolve_views_dir(base_dir: Path | None = None) -> Path:
    return (base_dir or resolve_base_dir()) / _VIEWS_DIR


def resolve_active_entry_view(base_dir: Path | None = None) -> Path:
    return resolve_views_dir(base_dir) / _ACTIVE_ENTRY_VIEW


@dataclass(frozen=True)
class StoragePaths:
    """Fixed sub-paths for one storage root."""

    base_dir: Path

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> StoragePaths:
        return cls(resolve_base_dir(env))

    @property
    def entries_dir(self) -> Path:
        return resolve_entries_dir(self.base_dir)

    @property
    def active_file(self) -> Path:
        return resolve_active_file(self.base_dir)

    @property
    def views_dir(self) -> Path:
        return resolve_views_dir(self.base_dir)

    @property
    def active_entry_view(self) -> Path:
        return resolve_active_entry_view(self.base_dir)

    @property
    def config_file(self) -> Path:
        return self.base_dir / "config.toml"
