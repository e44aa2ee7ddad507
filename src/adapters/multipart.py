"""Hand-built multipart/form-data request.

One part, one file, one boundary. The wire layout is fixed:

    POST / HTTP/1.0\\r\\n
    Host: localhost\\r\\n
    Connection: close\\r\\n
    Content-Type: <type>;boundary="<B>"\\r\\n
    \\r\\n
    --<B>\\r\\n
    Content-Disposition: form-data; filename="<name>"\\r\\n
    \\r\\n
    <file bytes>\\r\\n--<B>--

There is no Content-Length; the listener reads until the client half-closes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from core.config import AppSettings

CRLF = b"\r\n"
REQUEST_LINE = b"POST / HTTP/1.0"
HOST_HEADER = "localhost"


def validate_boundary(boundary: str) -> str:
    """Reject tokens that would break the header or the body framing."""

    if not boundary:
        raise ValueError("boundary must not be empty")
    if any(ch in boundary for ch in ("\r", "\n", '"')):
        raise ValueError("boundary must not contain CR, LF or double quotes")
    if not boundary.isascii():
        raise ValueError("boundary must be ASCII")
    return boundary


@dataclass(frozen=True)
class MultipartEnvelope:
    """The request wrapped around a source file."""

    source: Path
    boundary: str
    filename: str = "dest.img"
    content_type: str = "multipart/form-data"
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        validate_boundary(self.boundary)
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def from_settings(cls, source: Path, settings: AppSettings) -> "MultipartEnvelope":
        _, boundary, _ = settings.require()
        return cls(
            source=source,
            boundary=boundary,
            filename=settings.output_file,
            content_type=settings.content_type,
            chunk_size=settings.chunk_size,
        )

    def content_type_header(self) -> str:
        return f'{self.content_type};boundary="{self.boundary}"'

    def request_headers(self) -> dict[str, str]:
        return {
            "Host": HOST_HEADER,
            "Connection": "close",
            "Content-Type": self.content_type_header(),
        }

    def request_head(self) -> bytes:
        """Request line and headers, including the blank line that ends them."""

        lines = [REQUEST_LINE]
        for name, value in self.request_headers().items():
            lines.append(f"{name}: {value}".encode("latin-1"))
        return CRLF.join(lines) + CRLF + CRLF

    def part_head(self) -> bytes:
        return (
            b"--" + self.boundary.encode("ascii") + CRLF
            + f'Content-Disposition: form-data; filename="{self.filename}"'.encode("utf-8")
            + CRLF
            + CRLF
        )

    def epilogue(self) -> bytes:
        return CRLF + b"--" + self.boundary.encode("ascii") + b"--"

    def body_length(self) -> int:
        return len(self.part_head()) + self.source.stat().st_size + len(self.epilogue())

    def __len__(self) -> int:
        return len(self.request_head()) + self.body_length()

    def iter_file(self) -> Iterator[bytes]:
        with self.source.open("rb") as fh:
            while True:
                chunk = fh.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk

    def iter_body(self) -> Iterator[bytes]:
        """Multipart body only (for clients that write the head themselves)."""

        yield self.part_head()
        yield from self.iter_file()
        yield self.epilogue()

    def iter_wire(self) -> Iterator[bytes]:
        """Full request exactly as written to a raw connection."""

        yield self.request_head()
        yield from self.iter_body()
