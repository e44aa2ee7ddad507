"""JSON export of a check result.

Why JSON:
- CI jobs can archive the digests and the listener's reply line.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import CheckResult


def export_result_json(*, result: CheckResult, output_path: Path) -> Path:
    """Write `CheckResult` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    payload["passed"] = result.passed
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
