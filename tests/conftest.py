"""Shared fixtures: every test gets its own storage root under tmp_path."""

from __future__ import annotations

from pathlib import Path

import pytest

from side_context.paths import SIDE_CONTEXT_HOME_ENV, StoragePaths
from side_context.store import EntryStore


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SIDE_CONTEXT_HOME_ENV, raising=False)
    monkeypatch.delenv("SIDE_CONTEXT_LOG_LEVEL", raising=False)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    return tmp_path / "side-context"


@pytest.fixture
def paths(home: Path) -> StoragePaths:
    return StoragePaths(home)


@pytest.fixture
def store(paths: StoragePaths) -> EntryStore:
    return EntryStore(paths)
