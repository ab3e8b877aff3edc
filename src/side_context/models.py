"""Data models for the file-based entry store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

ENTRY_PREFIX = "entry_"
ENTRY_EXTENSION = ".json"
ENTRY_ID_WIDTH = 5

ENTRY_ID_RE = re.compile(rf"{ENTRY_PREFIX}([0-9]+)")
ENTRY_FILE_RE = re.compile(rf"{ENTRY_PREFIX}([0-9]+){re.escape(ENTRY_EXTENSION)}")


class EntryStatus(StrEnum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"


OPEN_STATUSES = frozenset({EntryStatus.TODO, EntryStatus.DOING})


def now_iso() -> str:
    """Current UTC time as a sortable ISO-8601 string, e.g. 2026-01-02T03:04:05.678Z."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_entry_id(sequence: int) -> str:
    """entry_ + 5-digit zero-padded sequence: 7 -> entry_00007."""
    return f"{ENTRY_PREFIX}{sequence:0{ENTRY_ID_WIDTH}d}"


def parse_entry_sequence(file_name: str) -> int | None:
    """Return the numeric suffix of an entry file name, or None if it isn't one."""
    m = ENTRY_FILE_RE.fullmatch(file_name)
    if m is None:
        return None
    return int(m.group(1))


def is_entry_id(value: str) -> bool:
    return ENTRY_ID_RE.fullmatch(value) is not None


@dataclass(frozen=True)
class CreateEntryInput:
    """Payload for one entry to create."""

    title: str
    note: str | None = None


@dataclass(frozen=True)
class EntryRecord:
    """One entry as persisted in entries/<entryId>.json."""

    entry_id: str
    title: str
    note: str
    status: EntryStatus
    created_at: str
    updated_at: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EntryRecord:
        return cls(
            entry_id=d["entryId"],
            title=d["title"],
            note=d.get("note", ""),
            status=EntryStatus(d["status"]),
            created_at=d["createdAt"],
            updated_at=d["updatedAt"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "entryId": self.entry_id,
            "title": self.title,
            "note": self.note,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def summary(self) -> EntrySummary:
        return EntrySummary(
            entry_id=self.entry_id,
            title=self.title,
            status=self.status,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True)
class EntrySummary:
    """Lightweight projection returned by list operations."""

    entry_id: str
    title: str
    status: EntryStatus
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "entryId": self.entry_id,
            "title": self.title,
            "status": self.status.value,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class ActivePointer:
    """Contents of active.json."""

    entry_id: str
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"entryId": self.entry_id}
        if self.updated_at:
            d["updatedAt"] = self.updated_at
        return d
