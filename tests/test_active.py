"""Tests for the active-entry pointer and its Markdown view."""

from __future__ import annotations

import json

import pytest

from side_context.active import render_active_entry_markdown
from side_context.errors import EntryNotFoundError
from side_context.models import CreateEntryInput, EntryRecord, EntryStatus
from side_context.store import EntryStore


def _view(store: EntryStore) -> str:
    return store.paths.active_entry_view.read_text(encoding="utf-8")


@pytest.fixture
def two_entries(store: EntryStore) -> list[EntryRecord]:
    return store.create_entries([
        CreateEntryInput("A", note="first note"),
        CreateEntryInput("B"),
    ])


class TestRender:
    def test_none(self):
        md = render_active_entry_markdown(None, "2026-01-01T00:00:00.000Z")
        assert md == (
            "# Active Entry: (none)\n"
            "Last Switched: 2026-01-01T00:00:00.000Z\n"
            "\n"
            "No active entry is set.\n"
        )

    def test_record(self):
        record = EntryRecord(
            entry_id="entry_00003",
            title="Ship it",
            note="line 1\nline 2",
            status=EntryStatus.DOING,
            created_at="2026-01-01T00:00:00.000Z",
            updated_at="2026-01-02T00:00:00.000Z",
        )
        md = render_active_entry_markdown(record, "2026-01-03T00:00:00.000Z")
        assert md == (
            "# Active Entry: [entry_00003] Ship it\n"
            "Status: doing\n"
            "Last Updated: 2026-01-02T00:00:00.000Z\n"
            "Last Switched: 2026-01-03T00:00:00.000Z\n"
            "\n"
            "## Note\n"
            "line 1\nline 2\n"
        )

    def test_blank_note_placeholder(self):
        record = EntryRecord("entry_00001", "T", "   \n", EntryStatus.TODO, "x", "x")
        assert render_active_entry_markdown(record, "y").endswith("## Note\n(none)\n")


class TestGetActive:
    def test_unset(self, store: EntryStore):
        assert store.active.get_active_entry_record() is None
        assert store.active.read_pointer() is None

    def test_pointer_written_externally(self, store: EntryStore, two_entries):
        store.paths.base_dir.mkdir(parents=True, exist_ok=True)
        store.paths.active_file.write_text(
            json.dumps({"entryId": "entry_00002", "updatedAt": "2026-01-01T00:00:00.000Z"}),
            encoding="utf-8",
        )
        assert store.active.get_active_entry_record() == two_entries[1]

    @pytest.mark.parametrize(
        "content",
        [b"{not json", b"\xff\xfe\x00garbage", b"[]", b'{"entryId": 5}', b"null"],
    )
    def test_malformed_pointer_reads_as_none(self, store: EntryStore, two_entries, content):
        store.paths.active_file.write_bytes(content)
        assert store.active.read_pointer() is None
        assert store.active.get_active_entry_record() is None

    def test_stale_pointer_reads_as_none(self, store: EntryStore, two_entries):
        store.paths.active_file.write_text('{"entryId": "entry_00099"}', encoding="utf-8")
        assert store.active.get_active_entry_record() is None
        # not repaired by the read
        assert store.paths.active_file.exists()

    def test_pointer_io_error_propagates(self, store: EntryStore, two_entries):
        store.paths.active_file.mkdir(parents=True)
        with pytest.raises(OSError):
            store.active.read_pointer()
        with pytest.raises(OSError):
            store.active.get_active_entry_record()


class TestSetActive:
    def test_set(self, store: EntryStore, two_entries):
        record = store.active.set_active_entry_record("entry_00001")
        assert record == two_entries[0]

        pointer = json.loads(store.paths.active_file.read_text(encoding="utf-8"))
        assert pointer["entryId"] == "entry_00001"
        assert pointer["updatedAt"].endswith("Z")

        view = _view(store)
        assert view.startswith("# Active Entry: [entry_00001] A\n")
        assert "Status: todo" in view
        assert "first note" in view
        assert f"Last Switched: {pointer['updatedAt']}" in view

        assert store.active.get_active_entry_record() == two_entries[0]

    def test_switch(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        store.active.set_active_entry_record("entry_00002")
        assert store.active.active_entry_id() == "entry_00002"
        assert "[entry_00002] B" in _view(store)
        assert "## Note\n(none)\n" in _view(store)

    def test_unknown_id_leaves_pointer(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        before = store.paths.active_file.read_text(encoding="utf-8")
        with pytest.raises(EntryNotFoundError, match="entry not found: entry_00404"):
            store.active.set_active_entry_record("entry_00404")
        assert store.paths.active_file.read_text(encoding="utf-8") == before

    def test_clear(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        assert store.active.set_active_entry_record(None) is None
        assert not store.paths.active_file.exists()
        assert _view(store).startswith("# Active Entry: (none)\n")
        assert store.active.get_active_entry_record() is None

    def test_clear_is_idempotent(self, store: EntryStore):
        store.active.set_active_entry_record(None)
        store.active.set_active_entry_record(None)
        assert not store.paths.active_file.exists()
        assert "No active entry is set." in _view(store)


class TestInvalidation:
    def test_update_active_refreshes_view(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        switched = json.loads(store.paths.active_file.read_text(encoding="utf-8"))["updatedAt"]

        updated = store.update_entry("entry_00001", note="after memo", status="doing")

        view = _view(store)
        assert "Status: doing" in view
        assert "after memo" in view
        assert f"Last Updated: {updated.updated_at}" in view
        assert f"Last Switched: {switched}" in view
        assert store.active.active_entry_id() == "entry_00001"

    def test_update_inactive_leaves_view(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        before = _view(store)
        store.update_entry("entry_00002", note="elsewhere")
        assert _view(store) == before

    def test_delete_active_clears_pointer(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        store.delete_entries(["entry_00001"])
        assert not store.paths.active_file.exists()
        assert "# Active Entry: (none)" in _view(store)
        assert [s.entry_id for s in store.list_entry_summaries()] == ["entry_00002"]

    def test_failed_delete_keeps_pointer(self, store: EntryStore, two_entries):
        store.active.set_active_entry_record("entry_00001")
        with pytest.raises(EntryNotFoundError):
            store.delete_entries(["entry_00001", "entry_00404"])
        assert store.active.active_entry_id() == "entry_00001"
        assert "[entry_00001] A" in _view(store)
