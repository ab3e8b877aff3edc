"""Stdio MCP server for side-context.

Tools:
    createEntries(entries)              → {"entryIds": [...]}
    setActiveEntry(entryId | null)      → record | null
    getActiveEntry()                    → record | null
    deleteEntries(entryIds)             → {"deletedEntryIds": [...]}
    updateEntry(entryId, note?, status?) → record
    listEntries(includeDone?)           → [summary, ...]

Every result is JSON text. Argument and storage errors come back as tool
results with isError=true.

Protocol: JSON-RPC 2.0 over stdin/stdout.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Any

from side_context import __version__
from side_context.errors import SideContextError
from side_context.models import CreateEntryInput, EntryStatus
from side_context.store import EntryStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from side_context.config import SideContextConfig

logger = logging.getLogger("side_context.mcp")

SERVER_NAME = "side-context-mcp"
SERVER_INSTRUCTIONS = "side-context-mcp MCP server providing shared entry memo operations."
PROTOCOL_VERSION = "2024-11-05"
# one JSON-RPC message per line; notes have no size cap
READ_LIMIT = 64 * 1024 * 1024

_STATUSES = [s.value for s in EntryStatus]


class ToolArgumentError(ValueError):
    """Tool arguments did not match the tool's input schema."""


def _tool_defs() -> list[dict[str, Any]]:
    return [
        {
            "name": "createEntries",
            "description": "Create one or more todo-style entries. Returns the allocated entry IDs.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "entries": {
                        "type": "array",
                        "minItems": 1,
                        "items": {
                            "type": "object",
                            "properties": {
                                "title": {"type": "string", "minLength": 1},
                                "note": {"type": "string"},
                            },
                            "required": ["title"],
                        },
                    },
                },
                "required": ["entries"],
            },
        },
        {
            "name": "setActiveEntry",
            "description": "Set the active entry by ID, or clear it with null. Regenerates the active view.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "entryId": {"type": ["string", "null"]},
                },
                "required": ["entryId"],
            },
        },
        {
            "name": "getActiveEntry",
            "description": "Return the active entry record, or null when none is set.",
            "inputSchema": {"type": "object", "properties": {}},
        },
        {
            "name": "deleteEntries",
            "description": "Delete entries by ID. Nothing is deleted if any ID is unknown.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "entryIds": {"type": "array", "minItems": 1, "items": {"type": "string"}},
                },
                "required": ["entryIds"],
            },
        },
        {
            "name": "updateEntry",
            "description": "Update the note and/or status of an entry.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "entryId": {"type": "string"},
                    "note": {"type": "string"},
                    "status": {"type": "string", "enum": _STATUSES},
                },
                "required": ["entryId"],
            },
        },
        {
            "name": "listEntries",
            "description": "List entry summaries sorted by ID. Done entries are hidden unless includeDone is true.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "includeDone": {"type": "boolean", "default": False},
                },
            },
        },
    ]


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------


def _require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str):
        msg = f"{key} must be a string"
        raise ToolArgumentError(msg)
    return value


def _optional_str(args: dict[str, Any], key: str) -> str | None:
    value = args.get(key)
    if value is not None and not isinstance(value, str):
        msg = f"{key} must be a string"
        raise ToolArgumentError(msg)
    return value


def _require_list(args: dict[str, Any], key: str) -> list[Any]:
    value = args.get(key)
    if not isinstance(value, list) or not value:
        msg = f"{key} must be a non-empty array"
        raise ToolArgumentError(msg)
    return value


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _invalid_params(msg_id: Any, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": -32602, "message": message}}


class SideContextServer:
    def __init__(self, config: SideContextConfig) -> None:
        self._cfg = config
        self._store = EntryStore(config.paths)

    def _call_create_entries(self, args: dict[str, Any]) -> str:
        inputs: list[CreateEntryInput] = []
        for item in _require_list(args, "entries"):
            if not isinstance(item, dict):
                msg = "each entry must be an object"
                raise ToolArgumentError(msg)
            title = _require_str(item, "title")
            if not title.strip():
                msg = "entry title must not be empty"
                raise ToolArgumentError(msg)
            inputs.append(CreateEntryInput(title=title, note=_optional_str(item, "note")))
        records = self._store.create_entries(inputs)
        return _to_json({"entryIds": [r.entry_id for r in records]})

    def _call_set_active_entry(self, args: dict[str, Any]) -> str:
        if "entryId" not in args:
            msg = "entryId is required (use null to clear)"
            raise ToolArgumentError(msg)
        record = self._store.active.set_active_entry_record(_optional_str(args, "entryId"))
        return _to_json(record.to_dict() if record else None)

    def _call_get_active_entry(self, args: dict[str, Any]) -> str:
        record = self._store.active.get_active_entry_record()
        return _to_json(record.to_dict() if record else None)

    def _call_delete_entries(self, args: dict[str, Any]) -> str:
        entry_ids = _require_list(args, "entryIds")
        if not all(isinstance(e, str) for e in entry_ids):
            msg = "entryIds must contain only strings"
            raise ToolArgumentError(msg)
        deleted = self._store.delete_entries(entry_ids)
        return _to_json({"deletedEntryIds": deleted})

    def _call_update_entry(self, args: dict[str, Any]) -> str:
        entry_id = _require_str(args, "entryId")
        note = _optional_str(args, "note")
        status = _optional_str(args, "status")
        if status is not None and status not in _STATUSES:
            msg = f"status must be one of: {', '.join(_STATUSES)}"
            raise ToolArgumentError(msg)
        if note is None and status is None:
            msg = "provide note or status"
            raise ToolArgumentError(msg)
        record = self._store.update_entry(entry_id, note=note, status=status)
        return _to_json(record.to_dict())

    def _call_list_entries(self, args: dict[str, Any]) -> str:
        include_done = args.get("includeDone", False)
        if not isinstance(include_done, bool):
            msg = "includeDone must be a boolean"
            raise ToolArgumentError(msg)
        summaries = self._store.list_entry_summaries(include_done=include_done)
        return _to_json([s.to_dict() for s in summaries])

    def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        dispatch = {
            "createEntries": self._call_create_entries,
            "setActiveEntry": self._call_set_active_entry,
            "getActiveEntry": self._call_get_active_entry,
            "deleteEntries": self._call_delete_entries,
            "updateEntry": self._call_update_entry,
            "listEntries": self._call_list_entries,
        }
        if name not in dispatch:
            msg = f"Unknown tool: {name}"
            raise ToolArgumentError(msg)
        return dispatch[name](arguments)

    def handle_message(self, msg: dict[str, Any]) -> dict[str, Any] | None:
        """Answer one JSON-RPC message. Returns None for notifications."""
        method = msg.get("method", "")
        msg_id = msg.get("id")

        if method == "initialize":
            return {
                "jsonrpc": "2.0",
                "id": msg_id,
                "result": {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": SERVER_NAME, "version": __version__},
                    "instructions": SERVER_INSTRUCTIONS,
                },
            }

        if method == "tools/list":
            return {"jsonrpc": "2.0", "id": msg_id, "result": {"tools": _tool_defs()}}

        if method == "tools/call":
            params = msg.get("params") or {}
            if not isinstance(params, dict):
                return _invalid_params(msg_id, "params must be an object")
            tool_name = params.get("name", "")
            arguments = params.get("arguments") or {}
            if not isinstance(tool_name, str) or not isinstance(arguments, dict):
                return _invalid_params(msg_id, "name must be a string and arguments an object")
            try:
                text = self.call_tool(tool_name, arguments)
                is_error = False
            except (ToolArgumentError, SideContextError) as exc:
                text = str(exc)
                is_error = True
            except Exception as exc:
                logger.exception("tool %s failed", tool_name)
                text = f"Error: {exc}"
                is_error = True
            return {
                "jsonrpc": "2.0",
                "id": msg_id,
                "result": {
                    "content": [{"type": "text", "text": text}],
                    "isError": is_error,
                },
            }

        if msg_id is None:
            # notifications (notifications/initialized, ...) get no response
            return None

        return {
            "jsonrpc": "2.0",
            "id": msg_id,
            "error": {"code": -32601, "message": f"Method not found: {method}"},
        }


async def _serve(
    server: SideContextServer,
    reader: asyncio.StreamReader,
    write_json: Callable[[Any], None],
) -> None:
    """Answer newline-delimited JSON-RPC messages from `reader` until EOF."""
    while True:
        try:
            line = await reader.readline()
        except (asyncio.IncompleteReadError, EOFError):
            break
        except ValueError:
            # readline discards the over-long line before raising
            logger.warning("dropping over-long message")
            continue
        if not line:
            break
        try:
            msg = json.loads(line)
        except json.JSONDecodeError:
            logger.warning("dropping unparsable message")
            continue
        if not isinstance(msg, dict):
            continue

        response = server.handle_message(msg)
        if response is not None:
            write_json(response)


async def _run_server(config: SideContextConfig) -> None:
    server = SideContextServer(config)
    reader = asyncio.StreamReader(limit=READ_LIMIT)
    loop = asyncio.get_running_loop()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    writer_transport, _ = await loop.connect_write_pipe(asyncio.BaseProtocol, sys.stdout.buffer)

    def write_json(obj: Any) -> None:
        line = json.dumps(obj, ensure_ascii=False) + "\n"
        writer_transport.write(line.encode())

    logger.info("%s %s serving %s over stdio", SERVER_NAME, __version__, config.base_dir)
    await _serve(server, reader, write_json)


def run_server(config: SideContextConfig) -> None:
    """Entry point for `side-context-mcp serve`."""
    asyncio.run(_run_server(config))
