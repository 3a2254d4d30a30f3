"""CLI principal (Typer + Rich).

Por qué una CLI:
- Permite explorar un endpoint (find/insert/update/delete) sin escribir código.
- Reutiliza exactamente el mismo command chain que la librería.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.ui_components import build_entries_table, print_banner
from core.chain import CommandChain
from core.client import ODataClient
from core.config import AppSettings
from core.domain.errors import ODataError, ProtocolError
from core.values import as_identifier

app = typer.Typer(no_args_is_help=True, help="Fluent client for OData-style REST endpoints.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _build_client(settings: AppSettings) -> ODataClient:
    return ODataClient(settings)


def parse_value(raw: str) -> Any:
    """Interpreta escalares JSON (`18`, `true`, `null`); si no, string literal."""

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_assignments(items: list[str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for item in items:
        if "=" not in item:
            raise typer.BadParameter(f"Expected Name=Value, got {item!r}")
        name, raw = item.split("=", 1)
        name = name.strip()
        if not name:
            raise typer.BadParameter(f"Missing property name in {item!r}")
        out[name] = parse_value(raw)
    return out


def parse_key(items: list[str]) -> Any:
    """`--key 5` → 5; `--key A=1 --key B=2` → {"A": 1, "B": 2}; GUIDs → `uuid.UUID`."""

    if len(items) == 1 and "=" not in items[0]:
        return as_identifier(parse_value(items[0]))
    return parse_assignments(items)


def _chain(
    client: ODataClient,
    collection: str,
    key: list[str] | None,
    filter: str | None,
    select: str | None,
) -> CommandChain:
    chain = client.for_(collection)
    if key:
        chain = chain.key(parse_key(key))
    if filter:
        chain = chain.filter(filter)
    if select:
        chain = chain.select(*[name.strip() for name in select.split(",") if name.strip()])
    return chain


def _run(coro_factory) -> Any:
    async def runner() -> Any:
        async with _build_client(AppSettings()) as client:
            return await coro_factory(client)

    try:
        return asyncio.run(runner())
    except ProtocolError as exc:
        _console.print(f"[red]Error:[/red] {exc}")
        if exc.body:
            _console.print(exc.text, style="dim", markup=False)
        raise typer.Exit(code=1)
    except ODataError as exc:
        _console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)


def _print_entries(entries: list[dict[str, Any]], *, as_json: bool, title: str) -> None:
    if as_json:
        _console.print_json(data=entries, default=str)
        return
    if not entries:
        _console.print("[yellow]No entries found.[/yellow]")
        return
    _console.print(build_entries_table(entries, title=title))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests (never credentials)."),
    banner: bool = typer.Option(False, "--banner", help="Print the banner before running."),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=_console, show_path=False)],
        )
    if banner:
        print_banner(_console)


@app.command()
def find(
    collection: str = typer.Argument(..., help="Collection name (e.g. Products)."),
    key: Optional[list[str]] = typer.Option(None, "--key", "-k", help="Key value, or Name=Value (repeatable)."),
    filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Filter predicate, e.g. \"Name eq 'x'\"."),
    select: Optional[str] = typer.Option(None, "--select", "-s", help="Comma-separated property names."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
) -> None:
    """Find one entity (by key) or the entities of a collection."""

    entries = _run(lambda client: _chain(client, collection, key, filter, select).find_entries())
    _print_entries(entries, as_json=as_json, title=collection)


@app.command()
def insert(
    collection: str = typer.Argument(...),
    set_: list[str] = typer.Option(..., "--set", help="Name=Value (repeatable)."),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Insert a new entity."""

    values = parse_assignments(set_)
    entry = _run(lambda client: client.for_(collection).set(values).insert_entry())
    _print_entries([entry] if entry else [], as_json=as_json, title=f"{collection} (inserted)")


@app.command()
def update(
    collection: str = typer.Argument(...),
    set_: list[str] = typer.Option(..., "--set", help="Name=Value (repeatable)."),
    key: Optional[list[str]] = typer.Option(None, "--key", "-k"),
    filter: Optional[str] = typer.Option(None, "--filter", "-f"),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Update the given properties of one entity."""

    values = parse_assignments(set_)
    entry = _run(lambda client: _chain(client, collection, key, filter, None).set(values).update_entry())
    if entry is None:
        _console.print("[green]Updated.[/green]")
        return
    _print_entries([entry], as_json=as_json, title=f"{collection} (updated)")


@app.command()
def delete(
    collection: str = typer.Argument(...),
    key: Optional[list[str]] = typer.Option(None, "--key", "-k"),
    filter: Optional[str] = typer.Option(None, "--filter", "-f"),
) -> None:
    """Delete one entity."""

    _run(lambda client: _chain(client, collection, key, filter, None).delete_entry())
    _console.print("[green]Deleted.[/green]")


def run() -> None:
    app()
