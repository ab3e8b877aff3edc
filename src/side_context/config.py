"""SideContextConfig: where entries live and how noisy logging is.

Resolution order for the storage root:
    1. explicit ``home`` argument (the CLI's ``--home``)
    2. $SIDE_CONTEXT_MCP_HOME (ignored when blank)
    3. ~/.side-context-mcp

Optional <root>/config.toml:

    [logging]
    level = "INFO"

$SIDE_CONTEXT_LOG_LEVEL overrides the file.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from side_context.paths import StoragePaths, resolve_base_dir

if TYPE_CHECKING:
    from collections.abc import Mapping

LOG_LEVEL_ENV = "SIDE_CONTEXT_LOG_LEVEL"
_DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class SideContextConfig:
    """Resolved configuration for one storage root."""

    base_dir: Path
    log_level: str = _DEFAULT_LOG_LEVEL

    @property
    def paths(self) -> StoragePaths:
        return StoragePaths(self.base_dir)


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(
    home: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> SideContextConfig:
    """Build the config from arguments, environment and the optional config.toml."""
    environ = os.environ if env is None else env
    if home is not None and str(home).strip():
        base_dir = Path(home).expanduser().resolve()
    else:
        base_dir = resolve_base_dir(environ)

    raw = _load_toml(StoragePaths(base_dir).config_file)
    log_section = raw.get("logging", {})
    log_level = environ.get(LOG_LEVEL_ENV) or str(log_section.get("level", _DEFAULT_LOG_LEVEL))

    return SideContextConfig(base_dir=base_dir, log_level=log_level.upper())
