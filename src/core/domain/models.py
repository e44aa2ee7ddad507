"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  Core to I/O libraries.

Note:
- These models describe *what* a check produced, not *how* it was obtained.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class UploadTarget(BaseModel):
    """Where the request is sent."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(
        ...,
        min_length=1,
        description="Listener host name or address.",
    )
    port: int = Field(
        ...,
        ge=1,
        le=65535,
        description="Listener TCP port.",
    )

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class UploadResponse(BaseModel):
    """What came back from the listener.

    Only the first line of the reply is kept; status and headers are not
    interpreted.
    """

    first_line: str = Field(
        default="",
        description="First line of the reply without its line terminator.",
    )
    bytes_sent: int = Field(
        default=0,
        ge=0,
        description="Total request bytes written to the connection.",
    )
    replied: bool = Field(
        default=True,
        description="False when the listener closed without sending a single byte.",
    )


class FileDigest(BaseModel):
    """MD5 hex digest of a file on disk."""

    path: Path = Field(
        ...,
        description="File that was hashed.",
    )
    md5: str = Field(
        ...,
        min_length=32,
        max_length=32,
        description="Lowercase hex MD5 digest.",
    )
    size: int = Field(
        default=0,
        ge=0,
        description="Number of bytes hashed.",
    )


class IntegrityReport(BaseModel):
    """Comparison of the source file against the listener's copy."""

    source: FileDigest
    output: FileDigest

    @property
    def passed(self) -> bool:
        return self.source.md5 == self.output.md5


class CheckResult(BaseModel):
    """Outcome of one full upload check."""

    response: UploadResponse
    report: IntegrityReport
    output_removed: bool = Field(
        default=False,
        description="Whether the output file was deleted at the end of the run.",
    )

    @property
    def passed(self) -> bool:
        return self.report.passed
