"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import HttpxTransport
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.endpoint import Endpoint, resolve_url
from core.domain.errors import ErrorKind
from core.domain.result import Failure
from core.services.http_client import HttpClient

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    """Run one request through the typed client.

    Any classified HTTP answer proves connectivity; only transport-level
    failures (`unknown` without a status) and bad URLs count as FAIL.
    """

    client = HttpClient(HttpxTransport(settings))
    result = await client.fetch(Endpoint(endpoint=url), Any)
    if not isinstance(result, Failure):
        return True, "HTTP 2xx"
    error = result.error
    if error.kind is ErrorKind.URL_NOT_FOUND:
        return False, error.description
    if error.kind is ErrorKind.UNKNOWN and not error.has_response:
        return False, error.description
    if error.has_response:
        return True, f"Reachable (HTTP {error.status_code}, {error.kind.value})"
    return True, f"Reachable ({error.kind.value})"


@app.command()
def run(
    url: str = typer.Option("https://github.com", "--url", help="URL used for the connectivity check."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="typed-http Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("User config", "OK", str(get_user_env_file()))
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("User-Agent", "OK", settings.user_agent)
    if settings.base_url:
        if resolve_url(Endpoint(endpoint=settings.base_url)) is None:
            table.add_row("Base URL", "FAIL", f"{settings.base_url} is not an absolute http(s) URL")
        else:
            table.add_row("Base URL", "OK", settings.base_url)
    else:
        table.add_row("Base URL", "OPTIONAL", "Not set -> `get` requires absolute URLs")

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(url, settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        raise typer.Exit(code=1)


@app.command(name="set-base-url")
def set_base_url(
    base_url: str = typer.Argument(..., help="Absolute http(s) base URL."),
) -> None:
    """Store the default base URL in the user config .env."""

    if resolve_url(Endpoint(endpoint=base_url)) is None:
        raise typer.BadParameter("base_url must be an absolute http(s) URL")

    env_path = write_user_env_vars({"TYPED_HTTP_BASE_URL": base_url})
    _console.print(f"[green]Saved base URL to:[/green] {env_path}")
