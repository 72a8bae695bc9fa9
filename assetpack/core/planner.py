from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple

from assetpack.core.profiles import PolicyProfile
from assetpack.models import ArchivePlanItem, DependencyNode, Report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedNode:
    node: DependencyNode
    code: str  # NO_PATH | OUTSIDE_ASSETS | DUPLICATE_PATH | IGNORED | NOT_ON_DISK
    detail: str = ""


def archive_name_for(asset_path: str, profile: PolicyProfile) -> Optional[str]:
    """
    Entry name for an asset path, relative to the assets folder.
    None when the path does not live under it.
    """
    p = asset_path.replace("\\", "/").strip()
    prefix = profile.assets_prefix
    if prefix:
        if not p.startswith(prefix):
            return None
        p = p[len(prefix):]

    p = posixpath.normpath(p)
    if p in (".", "") or p.startswith("../") or p == ".." or posixpath.isabs(p):
        return None
    return p


def plan_archive(
    report: Report,
    deps: Sequence[DependencyNode],
    assets_root: str,
    profile: PolicyProfile,
) -> Tuple[List[ArchivePlanItem], List[SkippedNode]]:
    """
    Dry-run of an archive export:
      - dedupes nodes that resolve to the same file (first one wins)
      - drops nodes in the report's ignore-set
      - drops nodes whose file is not on disk (not an error)
    Input order is kept.
    """
    root = Path(assets_root).resolve()
    plan: List[ArchivePlanItem] = []
    skipped: List[SkippedNode] = []
    seen: Set[str] = set()

    for node in deps:
        if node is None:
            continue

        if not node.path:
            skipped.append(SkippedNode(node, "NO_PATH"))
            continue

        arcname = archive_name_for(node.path, profile)
        if arcname is None:
            skipped.append(SkippedNode(node, "OUTSIDE_ASSETS", node.path))
            continue

        src = os.path.normpath(str(root / arcname))
        key = os.path.normcase(src)
        if key in seen:
            skipped.append(SkippedNode(node, "DUPLICATE_PATH", src))
            continue
        seen.add(key)

        if report.is_ignored(node):
            skipped.append(SkippedNode(node, "IGNORED", src))
            continue

        # Built-in resources are referenced by the graph but never materialized
        if not os.path.isfile(src):
            skipped.append(SkippedNode(node, "NOT_ON_DISK", src))
            continue

        plan.append(
            ArchivePlanItem(
                node=node,
                src=src,
                arcname=arcname,
                meta_src=src + profile.metadata_suffix,
                meta_arcname=arcname + profile.metadata_suffix,
            )
        )

    for s in skipped:
        logger.debug("Skip %s (%s) %s", s.node.name, s.code, s.detail)

    return plan, skipped
