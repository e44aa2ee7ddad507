from __future__ import annotations

import re
import socketserver
import threading
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from core.config import AppSettings

BOUNDARY = "test-boundary-1234"

_ENV_NAMES = (
    "DIR",
    "BOUNDARY",
    "PORT",
    "HYPERSHARE_DIR",
    "HYPERSHARE_BOUNDARY",
    "HYPERSHARE_PORT",
    "HYPERSHARE_HOST",
    "HYPERSHARE_OUTPUT_FILE",
    "HYPERSHARE_CONTENT_TYPE",
    "HYPERSHARE_TRANSPORT",
    "HYPERSHARE_CONNECT_TIMEOUT_SECONDS",
    "HYPERSHARE_CHUNK_SIZE",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@dataclass
class ReceivedUpload:
    head: bytes
    body: bytes
    filename: str | None = None
    content: bytes | None = None


@dataclass
class UploadListener:
    """Minimal stand-in for the receiving server.

    Reads one request, pulls the single file part out of the multipart body
    and writes it as `<base_dir>/<filename>`.

    mode: "ok" writes the bytes as received, "corrupt" flips the first byte,
    "drop" writes nothing.
    """

    base_dir: Path
    host: str = "127.0.0.1"
    port: int = 0
    mode: str = "ok"
    reply: bytes = b"HTTP/1.0 200 OK\r\nContent-Length: 0\r\nConnection: close\r\n\r\n"
    received: list[ReceivedUpload] = field(default_factory=list)

    def handle(self, sock) -> None:
        data = bytearray()
        while b"\r\n\r\n" not in data:
            chunk = sock.recv(65536)
            if not chunk:
                break
            data.extend(chunk)
        head, _, body = bytes(data).partition(b"\r\n\r\n")
        headers = _parse_headers(head)

        length = headers.get("content-length")
        if length is not None:
            while len(body) < int(length):
                chunk = sock.recv(65536)
                if not chunk:
                    break
                body += chunk
        else:
            while True:
                chunk = sock.recv(65536)
                if not chunk:
                    break
                body += chunk

        upload = ReceivedUpload(head=head, body=body)
        self.received.append(upload)

        match = re.search(r'boundary="?([^";]+)"?', headers.get("content-type", ""))
        if match:
            filename, content = _split_part(body, match.group(1).encode("ascii"))
            upload.filename, upload.content = filename, content
            if filename and content is not None and self.mode != "drop":
                if self.mode == "corrupt" and content:
                    content = bytes([content[0] ^ 0xFF]) + content[1:]
                (self.base_dir / filename).write_bytes(content)

        sock.sendall(self.reply)


def _parse_headers(head: bytes) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in head.decode("latin-1").split("\r\n")[1:]:
        name, sep, value = line.partition(":")
        if sep:
            headers[name.strip().lower()] = value.strip()
    return headers


def _split_part(body: bytes, boundary: bytes) -> tuple[str | None, bytes | None]:
    opening = b"--" + boundary + b"\r\n"
    closing = b"\r\n--" + boundary + b"--"
    if not body.startswith(opening):
        return None, None
    part_head, _, rest = body[len(opening):].partition(b"\r\n\r\n")
    if rest.endswith(closing + b"\r\n"):
        rest = rest[: -len(closing) - 2]
    elif rest.endswith(closing):
        rest = rest[: -len(closing)]
    else:
        return None, None
    match = re.search(rb'filename="([^"]+)"', part_head)
    return (match.group(1).decode("utf-8") if match else None), rest


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    path = tmp_path / "share"
    path.mkdir()
    return path


@pytest.fixture
def listener(base_dir: Path):
    state = UploadListener(base_dir=base_dir)

    class Handler(socketserver.BaseRequestHandler):
        def handle(self) -> None:
            state.handle(self.request)

    server = socketserver.TCPServer((state.host, 0), Handler)
    state.port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield state
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def settings(base_dir: Path, listener: UploadListener) -> AppSettings:
    return AppSettings(
        _env_file=None,
        base_dir=base_dir,
        boundary=BOUNDARY,
        port=listener.port,
        host=listener.host,
        connect_timeout_seconds=5.0,
    )
