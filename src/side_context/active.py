"""The active-entry pointer (active.json) and its Markdown view.

active.json:
    {"entryId": "entry_00003", "updatedAt": "2026-...Z"}

No file means no active entry. The pointer is advisory: content that cannot
be decoded or parsed is treated as "no active entry" instead of an error.
views/active-entry.md is derived state, rewritten in full on every switch and
whenever the active record changes.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from side_context.atomic import write_json_atomic, write_text_atomic
from side_context.errors import EntryNotFoundError
from side_context.models import ActivePointer, EntryRecord, now_iso

if TYPE_CHECKING:
    from side_context.paths import StoragePaths
    from side_context.store import EntryStore

logger = logging.getLogger("side_context.active")

NONE_PLACEHOLDER = "(none)"
NO_ACTIVE_ENTRY_MESSAGE = "No active entry is set."


def _render_note(note: str) -> str:
    return note if note.strip() else NONE_PLACEHOLDER


def render_active_entry_markdown(record: EntryRecord | None, switched_at: str) -> str:
    """Render the view document for a record (or for no active entry)."""
    if record is None:
        return (
            f"# Active Entry: {NONE_PLACEHOLDER}\n"
            f"Last Switched: {switched_at}\n"
            f"\n"
            f"{NO_ACTIVE_ENTRY_MESSAGE}\n"
        )
    return (
        f"# Active Entry: [{record.entry_id}] {record.title}\n"
        f"Status: {record.status.value}\n"
        f"Last Updated: {record.updated_at}\n"
        f"Last Switched: {switched_at}\n"
        f"\n"
        f"## Note\n"
        f"{_render_note(record.note)}\n"
    )


class ActivePointerStore:
    """Owns active.json and views/active-entry.md for one storage root."""

    def __init__(self, paths: StoragePaths, entries: EntryStore) -> None:
        self.paths = paths
        self._entries = entries

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read_pointer(self) -> ActivePointer | None:
        """Parse active.json. Missing or malformed content reads as None."""
        path = self.paths.active_file
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("ignoring malformed pointer file %s", path)
            return None

        if not isinstance(parsed, dict) or not isinstance(parsed.get("entryId"), str):
            logger.warning("ignoring pointer file without entryId: %s", path)
            return None
        updated_at = parsed.get("updatedAt")
        return ActivePointer(
            entry_id=parsed["entryId"],
            updated_at=updated_at if isinstance(updated_at, str) else None,
        )

    def active_entry_id(self) -> str | None:
        pointer = self.read_pointer()
        return pointer.entry_id if pointer else None

    def get_active_entry_record(self) -> EntryRecord | None:
        """Resolve the pointer to a record. A stale pointer reads as None and is left as is."""
        pointer = self.read_pointer()
        if pointer is None:
            return None
        return self._entries.get_entry(pointer.entry_id)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set_active_entry_record(self, entry_id: str | None) -> EntryRecord | None:
        """Switch the active entry (None clears it) and regenerate the view.

        An unknown ID raises EntryNotFoundError and leaves active.json untouched.
        """
        switched_at = now_iso()

        if entry_id is None:
            self.paths.active_file.unlink(missing_ok=True)
            self._write_view(None, switched_at)
            logger.info("cleared active entry")
            return None

        record = self._entries.get_entry(entry_id)
        if record is None:
            raise EntryNotFoundError([entry_id])

        write_json_atomic(
            self.paths.active_file,
            ActivePointer(entry_id=record.entry_id, updated_at=switched_at).to_dict(),
        )
        self._write_view(record, switched_at)
        logger.info("active entry -> %s", record.entry_id)
        return record

    def refresh_view(self) -> None:
        """Re-render the view for the current pointer, keeping its switch time."""
        pointer = self.read_pointer()
        if pointer is None:
            self._write_view(None, now_iso())
            return
        record = self._entries.get_entry(pointer.entry_id)
        self._write_view(record, pointer.updated_at or now_iso())

    def _write_view(self, record: EntryRecord | None, switched_at: str) -> None:
        write_text_atomic(
            self.paths.active_entry_view,
            render_active_entry_markdown(record, switched_at),
        )
