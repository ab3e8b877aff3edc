"""side-context-mcp CLI: the same entry operations as the MCP tools, from a shell.

Commands:
    side-context-mcp [serve]                    start stdio MCP server (default)
    side-context-mcp create --title T [--note N] | --file entries.json
    side-context-mcp list [--include-done] [--format table|json]
    side-context-mcp active [show | set ID | clear]
    side-context-mcp update ID [--note N] [--status todo|doing|done]
    side-context-mcp delete [ID ...] [--file ids.json]

Global options: --home PATH, --json, --log-level LEVEL.
"""

from __future__ import annotations

import contextlib
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from side_context.config import SideContextConfig, load_config
from side_context.errors import SideContextError
from side_context.mcp import run_server
from side_context.models import CreateEntryInput, EntryRecord, EntryStatus
from side_context.store import EntryStore

if TYPE_CHECKING:
    from collections.abc import Iterator

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@dataclass
class _CliState:
    config: SideContextConfig
    as_json: bool = False

    def store(self) -> EntryStore:
        return EntryStore(self.config.paths)


def _load_cfg(home: str | None) -> SideContextConfig:
    try:
        return load_config(home)
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _setup_logging(level: str) -> None:
    # stderr only: stdout carries the MCP protocol in `serve`
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


@contextlib.contextmanager
def _storage_errors() -> Iterator[None]:
    """Turn storage errors into a one-line message and exit code 1."""
    try:
        yield
    except SideContextError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, ensure_ascii=False))


def _read_json_file(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"{path} is not valid JSON: {exc}"
        raise click.ClickException(msg) from exc


def _format_active(record: EntryRecord | None) -> str:
    if record is None:
        return "Active Entry: (none)"
    return f"Active Entry: [{record.entry_id}] {record.title} ({record.status.value})"


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.version_option(package_name="side-context-mcp")
@click.option(
    "--home",
    default=None,
    help="Data directory (overrides $SIDE_CONTEXT_MCP_HOME).",
)
@click.option("--json", "as_json", is_flag=True, help="Always print JSON.")
@click.option("--log-level", default=None, help="Logging level (overrides config).")
@click.pass_context
def cli(ctx: click.Context, home: str | None, as_json: bool, log_level: str | None) -> None:
    """side-context-mcp: todo-style entries with a single active entry."""
    cfg = _load_cfg(home)
    if log_level:
        cfg.log_level = log_level.upper()
    _setup_logging(cfg.log_level)
    ctx.obj = _CliState(config=cfg, as_json=as_json)

    if ctx.invoked_subcommand is None:
        run_server(cfg)


@cli.command()
@click.pass_obj
def serve(state: _CliState) -> None:
    """Start the stdio MCP server."""
    run_server(state.config)


# ---------------------------------------------------------------------------
# create / list
# ---------------------------------------------------------------------------


def _inputs_from_file(path: str) -> list[CreateEntryInput]:
    data = _read_json_file(path)
    if not isinstance(data, list):
        msg = f"{path} must contain a JSON array"
        raise click.ClickException(msg)

    inputs: list[CreateEntryInput] = []
    for item in data:
        if not isinstance(item, dict):
            msg = "each entry must be a JSON object"
            raise click.ClickException(msg)
        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            msg = "each entry needs a non-empty title"
            raise click.ClickException(msg)
        note = item.get("note")
        inputs.append(CreateEntryInput(title=title, note=note if isinstance(note, str) else None))
    return inputs


@cli.command()
@click.option("--title", default=None, help="Entry title")
@click.option("--note", default=None, help="Entry note")
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='JSON array of {"title", "note"} objects',
)
@click.pass_obj
def create(state: _CliState, title: str | None, note: str | None, file_path: str | None) -> None:
    """Create entries from --title/--note or from a JSON file."""
    if file_path and (title or note is not None):
        msg = "use either --title/--note or --file"
        raise click.UsageError(msg)
    if file_path:
        inputs = _inputs_from_file(file_path)
    elif title:
        inputs = [CreateEntryInput(title=title, note=note)]
    else:
        msg = "provide --title or --file"
        raise click.UsageError(msg)

    with _storage_errors():
        records = state.store().create_entries(inputs)

    entry_ids = [r.entry_id for r in records]
    if state.as_json:
        _echo_json({"entryIds": entry_ids})
    else:
        click.echo(f"Created entries: {', '.join(entry_ids)}")


@cli.command("list")
@click.option("--include-done", is_flag=True, help="Include entries with status done")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
)
@click.pass_obj
def list_cmd(state: _CliState, include_done: bool, output_format: str) -> None:
    """List entries sorted by ID."""
    summaries = state.store().list_entry_summaries(include_done=include_done)

    if state.as_json or output_format == "json":
        _echo_json([s.to_dict() for s in summaries])
        return

    if not summaries:
        click.echo("(no entries)")
        return

    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    table = Table(show_header=True, header_style="bold")
    table.add_column("entryId", no_wrap=True)
    table.add_column("status", no_wrap=True)
    table.add_column("title")
    table.add_column("updatedAt", style="dim", no_wrap=True)
    for s in summaries:
        table.add_row(s.entry_id, s.status.value, escape(s.title), s.updated_at)
    Console().print(table)


# ---------------------------------------------------------------------------
# active
# ---------------------------------------------------------------------------


@cli.group(invoke_without_command=True)
@click.pass_context
def active(ctx: click.Context) -> None:
    """Show or change the active entry (default: show)."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(active_show)


@active.command("show")
@click.pass_obj
def active_show(state: _CliState) -> None:
    """Show the active entry."""
    record = state.store().active.get_active_entry_record()
    if state.as_json:
        _echo_json(record.to_dict() if record else None)
        return
    click.echo(_format_active(record))
    if record is None:
        click.echo(f"View: {state.config.paths.active_entry_view}")


@active.command("set")
@click.argument("entry_id")
@click.pass_obj
def active_set(state: _CliState, entry_id: str) -> None:
    """Make ENTRY_ID the active entry."""
    with _storage_errors():
        record = state.store().active.set_active_entry_record(entry_id)
    if state.as_json:
        _echo_json(record.to_dict() if record else None)
    else:
        click.echo(_format_active(record))


@active.command("clear")
@click.pass_obj
def active_clear(state: _CliState) -> None:
    """Clear the active entry."""
    state.store().active.set_active_entry_record(None)
    if state.as_json:
        _echo_json(None)
    else:
        click.echo(_format_active(None))


# ---------------------------------------------------------------------------
# update / delete
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("entry_id")
@click.option("--note", default=None, help="New note (empty string clears it)")
@click.option("--status", default=None, type=click.Choice([s.value for s in EntryStatus]))
@click.pass_obj
def update(state: _CliState, entry_id: str, note: str | None, status: str | None) -> None:
    """Update the note and/or status of ENTRY_ID."""
    if note is None and status is None:
        msg = "provide --note or --status"
        raise click.UsageError(msg)

    with _storage_errors():
        record = state.store().update_entry(entry_id, note=note, status=status)

    if state.as_json:
        _echo_json(record.to_dict())
    else:
        click.echo(f"Updated {record.entry_id}")


@cli.command()
@click.argument("entry_ids", nargs=-1)
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON array of entry IDs",
)
@click.pass_obj
def delete(state: _CliState, entry_ids: tuple[str, ...], file_path: str | None) -> None:
    """Delete entries by ID.

    \b
    side-context-mcp delete entry_00001 entry_00002
    """
    ids = list(entry_ids)
    if file_path:
        data = _read_json_file(file_path)
        if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
            msg = f"{file_path} must contain a JSON array of strings"
            raise click.ClickException(msg)
        ids.extend(data)
    if not ids:
        msg = "provide at least one entry ID"
        raise click.UsageError(msg)

    with _storage_errors():
        deleted = state.store().delete_entries(ids)

    if state.as_json:
        _echo_json({"deletedEntryIds": deleted})
    else:
        click.echo(f"Deleted entries: {', '.join(deleted)}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
