from __future__ import annotations

from pathlib import Path

import pytest

from core.config import AppSettings
from core.domain.models import UploadResponse, UploadTarget
from core.errors import (
    CheckError,
    ConfigurationError,
    OutputFileMissing,
    OutputFileUnreadable,
    SourceFileMissing,
    TransportError,
)
from core.services.upload_check import PipelineHooks, UploadCheckRequest, build_transport, run_upload_check
from adapters.http_client import HttpxTransport
from adapters.tcp_client import SocketTransport
from tests.conftest import UploadListener


def test_hello_world_round_trip_passes(listener: UploadListener, settings: AppSettings, base_dir: Path) -> None:
    (base_dir / "hello.txt").write_bytes(b"hello world\n")
    lines: list[str] = []

    result = run_upload_check(
        UploadCheckRequest(file="hello.txt"),
        settings,
        hooks=PipelineHooks(response=lines.append),
    )

    assert result.passed
    assert lines == ["HTTP/1.0 200 OK"]
    assert result.report.source.md5 == "6f5902ac237024bdd0c176cb93063dc4"
    assert result.report.output.md5 == result.report.source.md5
    assert result.output_removed
    assert not (base_dir / "dest.img").exists()
    assert (base_dir / "hello.txt").exists()


def test_corrupted_copy_is_reported_not_raised(
    listener: UploadListener, settings: AppSettings, base_dir: Path
) -> None:
    listener.mode = "corrupt"
    (base_dir / "hello.txt").write_bytes(b"hello world\n")

    result = run_upload_check(UploadCheckRequest(file="hello.txt"), settings)

    assert not result.passed
    assert result.report.source.md5 != result.report.output.md5
    assert not (base_dir / "dest.img").exists()


def test_missing_output_file_aborts(listener: UploadListener, settings: AppSettings, base_dir: Path) -> None:
    listener.mode = "drop"
    (base_dir / "hello.txt").write_bytes(b"hello world\n")

    with pytest.raises(OutputFileMissing):
        run_upload_check(UploadCheckRequest(file="hello.txt"), settings)


def test_missing_source_aborts_before_connecting(settings: AppSettings, listener: UploadListener) -> None:
    with pytest.raises(SourceFileMissing):
        run_upload_check(UploadCheckRequest(file="absent.txt"), settings)

    assert listener.received == []


def test_output_file_removed_when_transport_fails(tmp_path: Path, base_dir: Path) -> None:
    (base_dir / "hello.txt").write_bytes(b"hello world\n")
    stale = base_dir / "dest.img"
    stale.write_bytes(b"stale")

    class FailingTransport:
        def send(self, target: UploadTarget, envelope) -> UploadResponse:
            raise TransportError("boom")

    settings = AppSettings(_env_file=None, base_dir=base_dir, boundary="b", port=9)

    with pytest.raises(TransportError):
        run_upload_check(UploadCheckRequest(file="hello.txt"), settings, transport=FailingTransport())

    assert not stale.exists()


def test_fake_transport_writing_output(base_dir: Path) -> None:
    (base_dir / "data.bin").write_bytes(b"\x00\x01\x02")
    sent: list[UploadTarget] = []

    class CopyingTransport:
        def send(self, target: UploadTarget, envelope) -> UploadResponse:
            sent.append(target)
            (base_dir / "dest.img").write_bytes(b"".join(envelope.iter_file()))
            return UploadResponse(first_line="OK", bytes_sent=len(envelope))

    settings = AppSettings(_env_file=None, base_dir=base_dir, boundary="b", port=4242, host="example.test")
    result = run_upload_check(UploadCheckRequest(file="data.bin"), settings, transport=CopyingTransport())

    assert result.passed
    assert sent == [UploadTarget(host="example.test", port=4242)]
    assert result.response.first_line == "OK"


def test_source_equal_to_output_is_refused(base_dir: Path) -> None:
    (base_dir / "dest.img").write_bytes(b"x")
    settings = AppSettings(_env_file=None, base_dir=base_dir, boundary="b", port=4242)

    with pytest.raises(ConfigurationError):
        run_upload_check(UploadCheckRequest(file="dest.img"), settings)

    assert (base_dir / "dest.img").exists()


def test_missing_configuration_aborts() -> None:
    with pytest.raises(ConfigurationError):
        run_upload_check(UploadCheckRequest(file="x"), AppSettings(_env_file=None))


def test_build_transport_follows_settings(base_dir: Path) -> None:
    socket_settings = AppSettings(_env_file=None, base_dir=base_dir, boundary="b", port=1)
    httpx_settings = AppSettings(_env_file=None, base_dir=base_dir, boundary="b", port=1, transport="httpx")

    assert isinstance(build_transport(socket_settings), SocketTransport)
    assert isinstance(build_transport(httpx_settings), HttpxTransport)


def test_unusable_boundary_is_a_configuration_error(base_dir: Path) -> None:
    (base_dir / "hello.txt").write_bytes(b"hello world\n")
    settings = AppSettings(_env_file=None, base_dir=base_dir, boundary='a"b', port=4242)

    with pytest.raises(ConfigurationError, match="Invalid boundary"):
        run_upload_check(UploadCheckRequest(file="hello.txt"), settings)


def test_output_path_that_is_a_directory_aborts_cleanly(
    listener: UploadListener, settings: AppSettings, base_dir: Path
) -> None:
    listener.mode = "drop"
    (base_dir / "hello.txt").write_bytes(b"hello world\n")
    (base_dir / "dest.img").mkdir()

    with pytest.raises(CheckError) as excinfo:
        run_upload_check(UploadCheckRequest(file="hello.txt"), settings)

    assert isinstance(excinfo.value, OutputFileUnreadable)
    assert (base_dir / "dest.img").is_dir()


def test_silent_listener_skips_response_hook(
    listener: UploadListener, settings: AppSettings, base_dir: Path
) -> None:
    listener.reply = b""
    (base_dir / "hello.txt").write_bytes(b"hello world\n")
    lines: list[str] = []

    result = run_upload_check(
        UploadCheckRequest(file="hello.txt"),
        settings,
        hooks=PipelineHooks(response=lines.append),
    )

    assert result.passed
    assert lines == []
    assert result.response.replied is False


def test_blank_first_line_is_still_reported(
    listener: UploadListener, settings: AppSettings, base_dir: Path
) -> None:
    listener.reply = b"\r\nrest"
    (base_dir / "hello.txt").write_bytes(b"hello world\n")
    lines: list[str] = []

    run_upload_check(UploadCheckRequest(file="hello.txt"), settings, hooks=PipelineHooks(response=lines.append))

    assert lines == [""]
