"""Transport contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- Lets the raw socket client and the httpx client be swapped, and lets tests
  plug in a fake without touching the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from core.domain.models import UploadResponse, UploadTarget

if TYPE_CHECKING:
    from adapters.multipart import MultipartEnvelope


@runtime_checkable
class RequestTransport(Protocol):
    """Minimal contract for sending one upload over one connection.

    Design rules:
    - The envelope is streamed; the source file is never read whole.
    - One connection per call; it is closed before returning.
    """

    def send(self, target: UploadTarget, envelope: "MultipartEnvelope") -> UploadResponse:
        ...
