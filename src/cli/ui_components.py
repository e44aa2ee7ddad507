"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets `run` and `doctor` share the same rendering.
"""

from __future__ import annotations

import logging

from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import AppSettings
from core.domain.models import IntegrityReport


def configure_logging(*, verbose: bool = False, console: Console | None = None) -> None:
    """Route stdlib logging through Rich on stderr."""

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


def print_banner(console: Console) -> None:
    title = Text("hypershare-check", style="bold cyan")
    subtitle = Text("Multipart upload • MD5 round-trip", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def response_line(first_line: str) -> Text:
    return Text(f" >>> response: {first_line}")


def print_report(console: Console, report: IntegrityReport) -> None:
    """`Passed` in green, or `Failed!!!` in red followed by both digests."""

    if report.passed:
        console.print(Text("Passed", style="green"))
        return
    console.print(Text("Failed!!!", style="red"))
    console.print(f"Source: {report.source.md5}", markup=False, highlight=False, soft_wrap=True)
    console.print(f"Output: {report.output.md5}", markup=False, highlight=False, soft_wrap=True)


def build_settings_table(settings: AppSettings) -> Table:
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for name, env in (("base_dir", "DIR"), ("boundary", "BOUNDARY"), ("port", "PORT")):
        value = getattr(settings, name)
        table.add_row(f"{name} ({env})", "[red]unset[/red]" if value in (None, "") else escape(str(value)))
    table.add_row("host", settings.host)
    table.add_row("output_file", settings.output_file)
    table.add_row("content_type", settings.content_type)
    table.add_row("transport", settings.transport)
    timeout = settings.connect_timeout_seconds
    table.add_row("connect_timeout_seconds", "none" if timeout is None else f"{timeout:g}")
    return table
