"""Read and write entries/<entryId>.json records.

EntryStore is the public API:
    store = EntryStore(StoragePaths(Path("/path/to/home")))
    [rec] = store.create_entries([CreateEntryInput("Write tests")])
    store.update_entry(rec.entry_id, status="doing")
    store.active.set_active_entry_record(rec.entry_id)
    store.delete_entries([rec.entry_id])

IDs are allocated by scanning entries/ for the highest numeric suffix, so
there is no counter file to drift from the records actually present.
Every read goes back to disk; nothing is cached between calls.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from side_context.active import ActivePointerStore
from side_context.atomic import write_json_atomic
from side_context.errors import EntryNotFoundError, InvalidArgumentError
from side_context.models import (
    ENTRY_EXTENSION,
    OPEN_STATUSES,
    CreateEntryInput,
    EntryRecord,
    EntryStatus,
    EntrySummary,
    format_entry_id,
    is_entry_id,
    now_iso,
    parse_entry_sequence,
)
from side_context.paths import StoragePaths

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger("side_context.store")


class EntryStore:
    """JSON-file-backed entry store."""

    def __init__(self, paths: StoragePaths | Path | str) -> None:
        self.paths = paths if isinstance(paths, StoragePaths) else StoragePaths(Path(paths))
        self.active = ActivePointerStore(self.paths, self)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def entries_dir(self) -> Path:
        return self.paths.entries_dir

    def _entry_path(self, entry_id: str) -> Path:
        return self.entries_dir / f"{entry_id}{ENTRY_EXTENSION}"

    def _iter_entry_paths(self) -> Iterator[Path]:
        for path in self.entries_dir.iterdir():
            if parse_entry_sequence(path.name) is not None:
                yield path

    def _next_sequence(self) -> int:
        """Highest suffix present in entries/ plus one (1 for a missing or empty dir)."""
        try:
            sequences = [
                seq for seq in (parse_entry_sequence(p.name) for p in self.entries_dir.iterdir())
                if seq is not None
            ]
        except FileNotFoundError:
            return 1
        logger.debug("scanned %d entry files in %s", len(sequences), self.entries_dir)
        return max(sequences, default=0) + 1

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> EntryRecord:
        return EntryRecord.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def _write(self, record: EntryRecord) -> None:
        write_json_atomic(self._entry_path(record.entry_id), record.to_dict())

    def exists(self, entry_id: str) -> bool:
        return is_entry_id(entry_id) and self._entry_path(entry_id).is_file()

    def get_entry(self, entry_id: str) -> EntryRecord | None:
        """Load one record. Returns None if it doesn't exist.

        Malformed record files are not skipped: the parse error propagates.
        """
        if not is_entry_id(entry_id):
            return None
        try:
            return self._read(self._entry_path(entry_id))
        except FileNotFoundError:
            return None

    def list_entry_summaries(self, *, include_done: bool = False) -> list[EntrySummary]:
        """Summaries of every record, sorted by entryId. `done` entries are hidden by default."""
        try:
            paths = list(self._iter_entry_paths())
        except FileNotFoundError:
            return []

        summaries: list[EntrySummary] = []
        for path in paths:
            record = self._read(path)
            if not include_done and record.status not in OPEN_STATUSES:
                continue
            summaries.append(record.summary())
        summaries.sort(key=lambda s: s.entry_id)
        return summaries

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_entries(self, inputs: Sequence[CreateEntryInput]) -> list[EntryRecord]:
        """Persist new records in input order, numbered consecutively from one directory scan."""
        if not inputs:
            msg = "entries must contain at least one item"
            raise InvalidArgumentError(msg)
        for item in inputs:
            if not item.title or not item.title.strip():
                msg = "entry title must not be empty"
                raise InvalidArgumentError(msg)

        self.entries_dir.mkdir(parents=True, exist_ok=True)
        sequence = self._next_sequence()

        records: list[EntryRecord] = []
        for item in inputs:
            timestamp = now_iso()
            record = EntryRecord(
                entry_id=format_entry_id(sequence),
                title=item.title,
                note=item.note if item.note is not None else "",
                status=EntryStatus.TODO,
                created_at=timestamp,
                updated_at=timestamp,
            )
            sequence += 1
            self._write(record)
            records.append(record)

        logger.info("created %s", ", ".join(r.entry_id for r in records))
        return records

    def update_entry(
        self,
        entry_id: str,
        *,
        note: str | None = None,
        status: EntryStatus | str | None = None,
    ) -> EntryRecord:
        """Merge note/status onto a record and rewrite it.

        An empty-string note clears the note. If the record is the active
        entry, the active view is regenerated.
        """
        if note is None and status is None:
            msg = "note or status must be provided"
            raise InvalidArgumentError(msg)

        new_status: EntryStatus | None = None
        if status is not None:
            try:
                new_status = EntryStatus(status)
            except ValueError:
                allowed = ", ".join(s.value for s in EntryStatus)
                msg = f"invalid status: {status} (expected one of {allowed})"
                raise InvalidArgumentError(msg) from None

        current = self.get_entry(entry_id)
        if current is None:
            raise EntryNotFoundError([entry_id])

        updated = dataclasses.replace(
            current,
            note=current.note if note is None else note,
            status=current.status if new_status is None else new_status,
            updated_at=now_iso(),
        )
        self._write(updated)
        logger.info("updated %s (status=%s)", entry_id, updated.status.value)

        if self.active.active_entry_id() == entry_id:
            self.active.refresh_view()
        return updated

    def delete_entries(self, entry_ids: Sequence[str]) -> list[str]:
        """Delete records by ID. All IDs are checked before any file is removed.

        Returns the de-duplicated IDs in first-occurrence order. Clears the
        active pointer if it referenced one of them.
        """
        if not entry_ids:
            msg = "entryIds must contain at least one item"
            raise InvalidArgumentError(msg)

        unique = list(dict.fromkeys(entry_ids))
        missing = [entry_id for entry_id in unique if not self.exists(entry_id)]
        if missing:
            raise EntryNotFoundError(missing)

        for entry_id in unique:
            self._entry_path(entry_id).unlink()
        logger.info("deleted %s", ", ".join(unique))

        if self.active.active_entry_id() in unique:
            self.active.set_active_entry_record(None)
        return unique
