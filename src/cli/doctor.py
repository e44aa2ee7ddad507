"""Doctor command for environment diagnostics."""

from __future__ import annotations

import socket

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cli.ui_components import build_settings_table, print_banner
from core.config import AppSettings, load_settings, write_user_env_vars
from core.errors import ConfigurationError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_listener(host: str, port: int, timeout: float = 2.0) -> tuple[bool, str]:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
        return True, f"{host}:{port} accepts connections"
    except OSError as exc:
        return False, str(exc)


def _check_base_dir(settings: AppSettings) -> tuple[bool, str]:
    if settings.base_dir is None:
        return False, "DIR is unset"
    if not settings.base_dir.is_dir():
        return False, f"{settings.base_dir} is not a directory"
    leftover = settings.base_dir / settings.output_file
    if leftover.exists():
        return True, f"{leftover} already exists and will be overwritten/removed by a run"
    return True, str(settings.base_dir)


@app.command()
def run(banner: bool = typer.Option(True, "--banner/--no-banner", help="Show the banner.")) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        _console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    if banner:
        print_banner(_console)
    _console.print(build_settings_table(settings))

    table = Table(title="hypershare-check Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    missing = settings.missing_required()
    if missing:
        table.add_row("Required config", "FAIL", "Missing: " + ", ".join(missing))
    else:
        table.add_row("Required config", "OK", "DIR, BOUNDARY, PORT set")

    ok_dir, detail_dir = _check_base_dir(settings)
    table.add_row("Base directory", "OK" if ok_dir else "FAIL", detail_dir)

    if settings.port is not None:
        ok_net, detail_net = _check_listener(settings.host, settings.port)
        table.add_row("Listener", "OK" if ok_net else "FAIL", detail_net)
    else:
        table.add_row("Listener", "SKIP", "PORT is unset")

    _console.print(table)

    if settings.content_type != "multipart/form-data":
        _console.print(
            f"\n[yellow]Note:[/yellow] Content-Type is {settings.content_type!r}; "
            "strict multipart parsers will reject it."
        )


@app.command()
def setup() -> None:
    """Interactive setup (stores DIR/BOUNDARY/PORT in the user config .env)."""

    base_dir = typer.prompt("Base directory (DIR)", default=".", show_default=True).strip()
    boundary = typer.prompt("Multipart boundary (BOUNDARY)", default="hypershare-boundary").strip()
    port = typer.prompt("Listener port (PORT)", default=80, type=int)

    if not base_dir or not boundary:
        raise typer.BadParameter("DIR and BOUNDARY are required")
    if not 1 <= port <= 65535:
        raise typer.BadParameter("PORT must be between 1 and 65535")

    env_path = write_user_env_vars(
        {
            "HYPERSHARE_DIR": base_dir,
            "HYPERSHARE_BOUNDARY": boundary,
            "HYPERSHARE_PORT": str(port),
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
