"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts and headers for every caller (transport, doctor).
- Makes testing easy: an `httpx.MockTransport` can be injected.

The httpx transport sends the same multipart body as the raw socket client,
but lets httpx write the request line and headers (HTTP/1.1, with an explicit
Content-Length so the body is not chunked).
"""

from __future__ import annotations

import logging

import httpx

from adapters.multipart import MultipartEnvelope
from core.config import AppSettings
from core.domain.models import UploadResponse, UploadTarget
from core.errors import TransportError

logger = logging.getLogger(__name__)


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` with the check's defaults.

    Why a builder:
    - Centralizes timeouts so every request behaves the same.
    - Lets tests pass a mock transport.
    """

    settings = settings or AppSettings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.connect_timeout_seconds),
        follow_redirects=False,
        headers={"User-Agent": "hypershare-check/0.1"},
        transport=transport,
    )


def target_url(target: UploadTarget) -> str:
    host = f"[{target.host}]" if ":" in target.host else target.host
    return f"http://{host}:{target.port}/"


class HttpxTransport:
    """Uploads the envelope body with `httpx.Client.post`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client

    def send(self, target: UploadTarget, envelope: MultipartEnvelope) -> UploadResponse:
        headers = envelope.request_headers()
        headers.pop("Host", None)
        body_length = envelope.body_length()
        headers["Content-Length"] = str(body_length)

        url = target_url(target)
        logger.debug("POST %s (%d body bytes)", url, body_length)

        client = self._client or build_client(self._settings)
        try:
            response = client.post(url, content=envelope.iter_body(), headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {target} failed: {exc}") from exc
        finally:
            if self._client is None:
                client.close()

        first_line = f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()
        return UploadResponse(first_line=first_line, bytes_sent=body_length)
