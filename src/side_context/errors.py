"""Errors raised by the entry store.

Filesystem failures other than "file does not exist" are not wrapped: they
propagate unchanged as OSError.
"""

from __future__ import annotations

from collections.abc import Iterable


class SideContextError(Exception):
    """Base class for storage errors a caller is expected to present to a user."""


class InvalidArgumentError(SideContextError, ValueError):
    """An input collection was empty, or an update named no field to change."""


class EntryNotFoundError(SideContextError, LookupError):
    """One or more referenced entry IDs do not exist."""

    def __init__(self, entry_ids: Iterable[str]) -> None:
        self.entry_ids = list(entry_ids)
        if len(self.entry_ids) == 1:
            msg = f"entry not found: {self.entry_ids[0]}"
        else:
            msg = f"entries not found: {', '.join(self.entry_ids)}"
        super().__init__(msg)
