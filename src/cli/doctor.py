"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.credentials import credentials_from_settings
from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.url_builder import host_of

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    credentials = credentials_from_settings(settings)
    headers = dict(credentials.auth_headers()) if credentials is not None else None
    try:
        async with build_async_client(settings, extra_headers=headers) as client:
            response = await client.get(settings.base_url)
        return response.status_code < 400, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="fluent-odata Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.base_url:
        table.add_row("Service root", "OK", settings.base_url)
    else:
        table.add_row("Service root", "MISSING", "Set FLUENT_ODATA_BASE_URL or run `doctor setup`")

    if settings.token:
        table.add_row("Credentials", "OK", "Bearer token")
    elif settings.username:
        table.add_row("Credentials", "OK", f"Basic auth ({settings.username})")
    else:
        table.add_row("Credentials", "OPTIONAL", "Anonymous requests")
    table.add_row("Update method", "OK", settings.update_method)
    table.add_row("Key/filter policy", "OK", settings.key_filter_policy.value)

    # Connectivity (best-effort)
    if settings.base_url:
        ok_http, detail_http = asyncio.run(_check_http(settings))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", f"{host_of(settings.base_url)}: {detail_http}")

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive endpoint setup (stores config in the user config .env)."""

    base_url = typer.prompt("Service root URL").strip()
    username = typer.prompt("Username (empty for anonymous)", default="", show_default=False).strip()
    password = ""
    if username:
        password = typer.prompt("Password", hide_input=True, confirmation_prompt=False).strip()

    if not base_url.startswith(("http://", "https://")):
        raise typer.BadParameter("base_url must start with http:// or https://")

    env_path = write_user_env_vars(
        {
            "FLUENT_ODATA_BASE_URL": base_url,
            "FLUENT_ODATA_USERNAME": username or None,
            "FLUENT_ODATA_PASSWORD": password or None,
        }
    )

    _console.print(f"[green]Saved endpoint config to:[/green] {env_path}")
