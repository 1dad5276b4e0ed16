"""CLI principal (Typer).

Comandos:
- `get`: una petición tipada y su resultado (valor o error clasificado).
- `doctor`: diagnósticos de entorno y configuración.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Union

import typer
from rich.console import Console

from adapters.http_client import HttpxTransport
from adapters.presenter import ResultPresenter
from cli import doctor
from cli.ui_components import RichResultDisplay, print_banner
from core.config import AppSettings
from core.domain.endpoint import Endpoint
from core.logging_config import configure_logging
from core.services.http_client import HttpClient

app = typer.Typer(no_args_is_help=True, help="Typed HTTP client: one request, one classified result.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

JsonBody = Union[dict[str, Any], list[Any]]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logs de depuración."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level, json=settings.log_json)


def _parse_params(values: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for raw in values:
        if "=" not in raw:
            raise typer.BadParameter(f"expected key=value, got {raw!r}", param_hint="--param")
        key, value = raw.split("=", 1)
        params[key.strip()] = value
    return params


def build_endpoint(target: str, *, base_url: str | None, params: dict[str, str]) -> Endpoint:
    """URL absoluta tal cual; una ruta se resuelve contra `base_url`."""

    if base_url and not target.startswith(("http://", "https://")):
        return Endpoint.build(base_url, target, params)
    if params:
        return Endpoint.build(target, "", params)
    return Endpoint(endpoint=target)


@app.command()
def get(
    target: str = typer.Argument(..., help="URL absoluta o ruta relativa a --base-url."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL (por defecto: config)."),
    param: List[str] = typer.Option([], "--param", "-p", help="Query param key=value (repetible)."),
    as_json: bool = typer.Option(False, "--json", help="Mostrar el cuerpo como JSON."),
    banner: bool = typer.Option(False, "--banner", help="Mostrar banner."),
) -> None:
    """GET tipado: decodifica el cuerpo JSON o muestra el error clasificado."""

    settings = AppSettings()
    if banner:
        print_banner(_console)

    endpoint = build_endpoint(target, base_url=base_url or settings.base_url, params=_parse_params(param))
    client = HttpClient(HttpxTransport(settings))
    result = asyncio.run(client.fetch(endpoint, JsonBody))

    display = RichResultDisplay(_console, as_json=as_json)
    ResultPresenter(display).present(result)
    if display.failed:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
