from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .contracts import BatchResult


def batch_manifest(result: BatchResult) -> dict[str, Any]:
    """
    JSON-ready batch report: per-file results plus converted/failed/skipped counts.
    """

    manifest = result.to_dict()
    manifest["summary"] = {
        "converted": sum(1 for r in result.results if r.ok),
        "failed": sum(1 for r in result.results if not r.ok),
        "skipped": len(result.skipped),
    }
    return manifest


def serialize_batch_result(result: BatchResult) -> str:
    return json.dumps(batch_manifest(result), ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_batch_manifest_json(*, result: BatchResult, out_manifest: Path) -> None:
    out_manifest.parent.mkdir(parents=True, exist_ok=True)
    tmp_manifest = out_manifest.with_name(f".{out_manifest.name}.tmp")
    tmp_manifest.write_text(serialize_batch_result(result), encoding="utf-8")
    tmp_manifest.replace(out_manifest)
