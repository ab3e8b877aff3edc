"""File-based entry store: one JSON file per entry plus an active-entry pointer.

Layout (under $SIDE_CONTEXT_MCP_HOME, default ~/.side-context-mcp):
    entries/
        entry_00001.json   # {"entryId", "title", "note", "status", "createdAt", "updatedAt"}
    active.json            # {"entryId", "updatedAt"}; absent = no active entry
    views/
        active-entry.md    # regenerated on every pointer change

Writes go to a temporary sibling and are renamed into place, so readers never
see a partial file. There is no lock file: one writer at a time is assumed.
"""

from side_context.active import ActivePointerStore, render_active_entry_markdown
from side_context.config import SideContextConfig, load_config
from side_context.errors import EntryNotFoundError, InvalidArgumentError, SideContextError
from side_context.models import CreateEntryInput, EntryRecord, EntryStatus, EntrySummary
from side_context.paths import StoragePaths
from side_context.store import EntryStore

__version__ = "0.1.0"

__all__ = [
    "ActivePointerStore",
    "CreateEntryInput",
    "EntryNotFoundError",
    "EntryRecord",
    "EntryStatus",
    "EntryStore",
    "EntrySummary",
    "InvalidArgumentError",
    "SideContextConfig",
    "SideContextError",
    "StoragePaths",
    "load_config",
    "render_active_entry_markdown",
]
