"""Write-to-temp-then-rename helpers.

A reader never observes a partially written file: content goes to
``<name>.tmp`` in the same directory and is moved over the target with
``Path.replace`` (atomic on POSIX when both live on one filesystem).
"""

from __future__ import annotations

import contextlib
import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


def write_text_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(path)
    except OSError:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def write_json_atomic(path: Path, data: Any) -> None:
    """Pretty JSON (2-space indent) with a trailing newline."""
    write_text_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
