"""Raw TCP transport.

Writes the hand-built request straight onto a socket, half-closes the write
side and keeps the first line of whatever comes back. No retries.
"""

from __future__ import annotations

import logging
import socket

from adapters.multipart import MultipartEnvelope
from core.config import AppSettings
from core.domain.models import UploadResponse, UploadTarget
from core.errors import TransportError

logger = logging.getLogger(__name__)

_RECV_SIZE = 4096


def read_first_line(sock: socket.socket) -> bytes | None:
    """Read until the first LF or EOF; the rest of the reply is ignored.

    Returns None when the peer closed without sending anything.
    """

    buf = bytearray()
    while True:
        chunk = sock.recv(_RECV_SIZE)
        if not chunk:
            break
        buf.extend(chunk)
        if b"\n" in chunk:
            break
    if not buf:
        return None
    line, _, _ = bytes(buf).partition(b"\n")
    return line.rstrip(b"\r")


class SocketTransport:
    """Sends the envelope over a fresh `socket.create_connection`."""

    def __init__(self, settings: AppSettings | None = None, *, timeout: float | None = None) -> None:
        settings = settings or AppSettings()
        self._timeout = timeout if timeout is not None else settings.connect_timeout_seconds

    def send(self, target: UploadTarget, envelope: MultipartEnvelope) -> UploadResponse:
        logger.debug("Connecting to %s", target)
        try:
            sock = socket.create_connection(target.address, timeout=self._timeout)
        except OSError as exc:
            raise TransportError(f"Could not connect to {target}: {exc}") from exc

        sent = 0
        try:
            with sock:
                for chunk in envelope.iter_wire():
                    sock.sendall(chunk)
                    sent += len(chunk)
                logger.debug("Sent %d bytes to %s", sent, target)
                try:
                    sock.shutdown(socket.SHUT_WR)
                except OSError:
                    # Peer may already have closed; whatever it wrote is still readable.
                    logger.debug("shutdown(SHUT_WR) failed; peer closed early")
                raw = read_first_line(sock)
        except OSError as exc:
            raise TransportError(f"Connection to {target} failed after {sent} bytes: {exc}") from exc

        return UploadResponse(
            first_line="" if raw is None else raw.decode("utf-8", errors="replace"),
            bytes_sent=sent,
            replied=raw is not None,
        )
