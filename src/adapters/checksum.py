"""MD5 digests for the integrity comparison."""

from __future__ import annotations

import hashlib
from pathlib import Path

from core.domain.models import FileDigest, IntegrityReport


def md5_file(path: Path, *, chunk_size: int = 64 * 1024) -> FileDigest:
    """Hash `path` in chunks; raises `FileNotFoundError` if it is absent."""

    hasher = hashlib.md5()
    size = 0
    with path.open("rb") as fh:
        while chunk := fh.read(chunk_size):
            hasher.update(chunk)
            size += len(chunk)
    return FileDigest(path=path, md5=hasher.hexdigest(), size=size)


def compare(source: FileDigest, output: FileDigest) -> IntegrityReport:
    return IntegrityReport(source=source, output=output)
