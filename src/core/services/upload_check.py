"""Upload check orchestration.

The whole check is one straight line: send the file, print the first reply
line, hash both copies, compare, delete the listener's copy. This module owns
that sequence so the CLI only deals with presentation, and tests can drive
the pipeline with a fake transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from adapters.checksum import compare, md5_file
from adapters.http_client import HttpxTransport
from adapters.multipart import MultipartEnvelope
from adapters.tcp_client import SocketTransport
from core.config import AppSettings
from core.domain.models import CheckResult, UploadTarget
from core.errors import ConfigurationError, OutputFileMissing, OutputFileUnreadable, SourceFileMissing
from core.interfaces.transport import RequestTransport

logger = logging.getLogger(__name__)


@dataclass
class UploadCheckRequest:
    """Parameters of one run."""

    file: str | Path


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    response: Callable[[str], None] | None = None
    info: Callable[[str], None] | None = None


def build_transport(settings: AppSettings) -> RequestTransport:
    if settings.transport == "httpx":
        return HttpxTransport(settings)
    return SocketTransport(settings)


def resolve_source(base_dir: Path, file: str | Path) -> Path:
    """`file` is relative to the base directory (absolute paths pass through)."""

    return base_dir / file


def remove_output(path: Path) -> bool:
    """Delete the listener's copy; returns whether a file was removed.

    Never raises: this runs in a `finally` and must not replace the error
    already in flight.
    """

    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("Could not remove %s: %s", path, exc)
        return False
    logger.debug("Removed %s", path)
    return True


def run_upload_check(
    request: UploadCheckRequest,
    settings: AppSettings | None = None,
    *,
    transport: RequestTransport | None = None,
    hooks: PipelineHooks | None = None,
) -> CheckResult:
    """Upload, compare and clean up.

    Raises a `CheckError` subclass on any abort (missing source, transport
    failure, missing or unreadable output). A digest mismatch is returned,
    not raised.
    The output file is removed once the upload has been attempted, whatever
    happens afterwards.
    """

    settings = settings or AppSettings()
    base_dir, _, port = settings.require()
    hooks = hooks or PipelineHooks()

    source = resolve_source(base_dir, request.file)
    output = base_dir / settings.output_file
    if not source.is_file():
        raise SourceFileMissing(source)
    if source.resolve() == output.resolve():
        raise ConfigurationError(f"Source file {source} is the output file and would be deleted.")

    target = UploadTarget(host=settings.host, port=port)
    try:
        envelope = MultipartEnvelope.from_settings(source, settings)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid boundary {settings.boundary!r}: {exc}") from exc
    transport = transport or build_transport(settings)

    if hooks.info:
        hooks.info(f"Writing {source.name} to {target}")

    try:
        response = transport.send(target, envelope)
        logger.info("Listener replied: %r (%d bytes sent)", response.first_line, response.bytes_sent)
        if hooks.response and response.replied:
            hooks.response(response.first_line)

        if hooks.info:
            hooks.info("Comparing files")
        source_digest = md5_file(source, chunk_size=settings.chunk_size)
        try:
            output_digest = md5_file(output, chunk_size=settings.chunk_size)
        except FileNotFoundError as exc:
            raise OutputFileMissing(output) from exc
        except OSError as exc:
            raise OutputFileUnreadable(output, exc) from exc
    finally:
        output_removed = remove_output(output)

    report = compare(source_digest, output_digest)
    if not report.passed:
        logger.warning("Digest mismatch: source=%s output=%s", report.source.md5, report.output.md5)
    return CheckResult(response=response, report=report, output_removed=output_removed)
