from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from assetpack.models import ArchivedEntry, ExportOutcome, ReportEntry


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _iso_mtime(ts: float) -> Optional[str]:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="seconds")
    except (OverflowError, OSError, ValueError):
        return None


def _entry_dict(e: ReportEntry) -> Dict[str, Any]:
    return {
        "level": e.severity,
        "code": e.code,
        "message": e.message,
        "node": e.node.name,
        "node_kind": e.node_kind_label,
    }


def _file_dict(e: ArchivedEntry) -> Dict[str, Any]:
    return {
        "arcname": e.arcname,
        "src": e.src,
        "size_bytes": e.size_bytes,
        "mtime": _iso_mtime(e.mtime),
        "digest": e.digest,
    }


def build_manifest_dict(
    outcomes: Sequence[ExportOutcome],
    tool_name: str,
    tool_version: str,
    profile: str,
    destination_dir: str,
    hash_algo: Optional[str] = None,
) -> Dict[str, Any]:
    targets: List[Dict[str, Any]] = []
    for o in outcomes:
        targets.append(
            {
                "target": o.target.name,
                "success": o.ok,
                "archive": o.archive_path,
                "error": o.error,
                "violations": [_entry_dict(e) for e in o.report.violations],
                "stats": [_entry_dict(e) for e in o.report.stats],
                "files": [_file_dict(e) for e in o.entries],
            }
        )

    return {
        "tool": tool_name,
        "version": tool_version,
        "timestamp_utc": _utc_now_iso(),
        "profile": profile,
        "destination": destination_dir,
        "hash_algo": hash_algo,
        "exported": sum(1 for o in outcomes if o.archive_path),
        "targets": targets,
    }


def write_manifest_json(manifest: Dict[str, Any], manifest_path: str) -> str:
    path = Path(manifest_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)

    return str(path)
