"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- `RichResultDisplay` es la vista que recibe resultados vía `ResultPresenter`.
"""

from __future__ import annotations

import json
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import ClientError


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("typed-http", style="bold cyan")
    subtitle = Text("Typed requests • Classified failures", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_value_table(value: dict[str, Any]) -> Table:
    """Tabla clave/valor para objetos JSON planos."""

    table = Table(title="Response")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, item in value.items():
        if isinstance(item, (dict, list)):
            rendered = json.dumps(item, ensure_ascii=False)
        else:
            rendered = str(item)
        table.add_row(str(key), rendered)
    return table


def build_error_panel(error: ClientError) -> Panel:
    """Panel para presentar un `ClientError`."""

    body = Text()
    body.append(error.description + "\n")
    body.append(f"\nKind: {error.kind.value}", style="dim")
    return Panel(body, title=Text("Request failed", style="bold red"), border_style="red")


class RichResultDisplay:
    """Vista de consola para `ResultPresenter`."""

    def __init__(self, console: Console, *, as_json: bool = False) -> None:
        self._console = console
        self._as_json = as_json
        self.failed = False

    def show_value(self, value: Any) -> None:
        if isinstance(value, dict) and value and not self._as_json:
            self._console.print(build_value_table(value))
            return
        self._console.print(JSON(json.dumps(value, ensure_ascii=False)))

    def show_error(self, error: ClientError) -> None:
        self.failed = True
        self._console.print(build_error_panel(error))
