"""hypershare-check CLI (Typer + Rich).

Commands:
- `run FILE`: upload FILE (relative to DIR) and verify the listener's copy.
- `doctor run` / `doctor setup`: diagnostics and persisted configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from adapters.json_exporter import export_result_json
from cli import doctor
from cli.ui_components import configure_logging, print_report, response_line
from core.config import load_settings
from core.errors import CheckError
from core.services.upload_check import PipelineHooks, UploadCheckRequest, run_upload_check

app = typer.Typer(
    no_args_is_help=True,
    help="Upload a file to a local listener as multipart/form-data and verify the written copy.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


@app.command("run")
def run_check(
    file: Path = typer.Argument(..., help="File to upload, relative to DIR."),
    base_dir: Path | None = typer.Option(None, "--dir", "-d", help="Base directory (overrides DIR)."),
    host: str | None = typer.Option(None, "--host", help="Listener host."),
    port: int | None = typer.Option(None, "--port", "-p", help="Listener port (overrides PORT)."),
    boundary: str | None = typer.Option(None, "--boundary", "-b", help="Boundary token (overrides BOUNDARY)."),
    output_file: str | None = typer.Option(None, "--output-file", help="Name the listener writes under DIR."),
    content_type: str | None = typer.Option(None, "--content-type", help="Media type sent before the boundary."),
    transport: str | None = typer.Option(None, "--transport", help="socket (default) or httpx."),
    timeout: float | None = typer.Option(None, "--timeout", help="Socket timeout in seconds."),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 when the digests differ."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the response and result."),
    report: Path | None = typer.Option(None, "--report", help="Also write the result as JSON to this path."),
) -> None:
    """Upload FILE, print the first reply line, compare MD5 digests, remove the copy."""

    configure_logging(verbose=verbose, console=_err_console)

    hooks = PipelineHooks(
        response=lambda line: _console.print(response_line(line), markup=False, highlight=False, soft_wrap=True),
        info=None if quiet else (lambda msg: _console.print(f"[dim]{escape(msg)}[/dim]")),
    )

    try:
        settings = load_settings(
            base_dir=base_dir,
            host=host,
            port=port,
            boundary=boundary,
            output_file=output_file,
            content_type=content_type,
            transport=transport,
            connect_timeout_seconds=timeout,
        )
        result = run_upload_check(UploadCheckRequest(file=file), settings, hooks=hooks)
    except CheckError as exc:
        logger.debug("Check aborted", exc_info=True)
        _err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1)

    print_report(_console, result.report)
    if report is not None:
        export_result_json(result=result, output_path=report)
    if strict and not result.passed:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
