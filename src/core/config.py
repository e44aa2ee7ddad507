"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) away from the CLI.
- Lets adapters (socket/httpx transports) read the same config consistently.

The bare `DIR`, `BOUNDARY` and `PORT` names are accepted so existing CI
wrappers keep working; the prefixed `HYPERSHARE_*` variants take precedence.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Per-user config directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "hypershare-check"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "hypershare-check"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "hypershare-check"
    return Path.home() / ".config" / "hypershare-check"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# hypershare-check user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without leaking into the Core.
    - A single configuration contract shared by the CLI and the transports.

    `base_dir`, `boundary` and `port` have no defaults; they are optional here
    so that `doctor` can report on a partial config, and `require()` turns
    their absence into a `ConfigurationError` before a run starts.
    """

    model_config = SettingsConfigDict(
        env_prefix="HYPERSHARE_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("HYPERSHARE_DIR", "DIR"),
        description="Directory holding the source file and the listener's output file.",
    )
    boundary: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HYPERSHARE_BOUNDARY", "BOUNDARY"),
        description="Multipart boundary token.",
    )
    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("HYPERSHARE_PORT", "PORT"),
        description="TCP port of the receiving listener.",
    )

    host: str = Field(
        default="localhost",
        min_length=1,
        description="Host the listener is bound to.",
    )
    output_file: str = Field(
        default="dest.img",
        min_length=1,
        description="Filename announced in the part header and written by the listener.",
    )
    content_type: str = Field(
        default="multipart/form-data",
        min_length=1,
        description="Media type placed before the boundary parameter in Content-Type.",
    )
    connect_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Socket timeout (seconds). None blocks indefinitely.",
    )
    transport: Literal["socket", "httpx"] = Field(
        default="socket",
        description="Raw TCP client or httpx for sending the request.",
    )
    chunk_size: int = Field(
        default=64 * 1024,
        ge=1,
        description="Chunk size for streaming the upload and hashing files.",
    )

    @field_validator("output_file")
    @classmethod
    def _plain_filename(cls, value: str) -> str:
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("output_file must be a bare filename")
        if any(ch in value for ch in ("\r", "\n", '"')):
            raise ValueError("output_file must not contain CR, LF or double quotes")
        return value

    @field_validator("content_type")
    @classmethod
    def _header_safe_media_type(cls, value: str) -> str:
        if not value.isascii():
            raise ValueError("content_type must be ASCII")
        if "\r" in value or "\n" in value:
            raise ValueError("content_type must not contain CR or LF")
        return value

    def missing_required(self) -> list[str]:
        """Names of the required variables that are still unset."""

        missing: list[str] = []
        if self.base_dir is None:
            missing.append("DIR")
        if not self.boundary:
            missing.append("BOUNDARY")
        if self.port is None:
            missing.append("PORT")
        return missing

    def require(self) -> tuple[Path, str, int]:
        """Return `(base_dir, boundary, port)` or raise naming what is unset."""

        base_dir, boundary, port = self.base_dir, self.boundary, self.port
        if base_dir is None or not boundary or port is None:
            raise ConfigurationError(
                "Missing required configuration: "
                + ", ".join(self.missing_required())
                + " (set them in the environment or run `hypershare-check doctor setup`)."
            )
        return base_dir, boundary, port


def load_settings(*, use_env_files: bool = True, **overrides: object) -> AppSettings:
    """Build settings from env/.env plus non-None CLI overrides.

    Validation failures become `ConfigurationError` so callers only handle
    the check's own error types.
    """

    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        if not use_env_files:
            return AppSettings(_env_file=None, **values)
        return AppSettings(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc
