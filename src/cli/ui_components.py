"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def print_banner(console: Console) -> None:
    title = Text("fluent-odata", style="bold cyan")
    subtitle = Text("find • insert • update • delete", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def format_cell(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def build_entries_table(entries: list[dict[str, Any]], *, title: str | None = None) -> Table:
    """Tabla Rich con una columna por propiedad (unión, en orden de aparición)."""

    columns: list[str] = []
    for entry in entries:
        for name in entry:
            if name not in columns:
                columns.append(name)

    table = Table(title=title)
    for index, name in enumerate(columns):
        table.add_column(name, style="cyan" if index == 0 else "white", overflow="fold")
    for entry in entries:
        table.add_row(*(format_cell(entry.get(name)) if name in entry else "" for name in columns))
    return table
