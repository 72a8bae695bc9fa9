from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from assetpack.core.analyzer import DependencyAnalyzer
from assetpack.core.archive import ArchiveExporter, DestinationDirectory
from assetpack.models import DependencyNode, ExportOutcome, Report

logger = logging.getLogger(__name__)

Target = Tuple[DependencyNode, Sequence[DependencyNode]]


def _cancelled_outcome(target: DependencyNode) -> ExportOutcome:
    report = Report(target)
    report.error("Export cancelled by user.", target, code="PACK_CANCELLED")
    return ExportOutcome(target=target, report=report, error="Export cancelled.")


def run_target(
    target: DependencyNode,
    deps: Sequence[DependencyNode],
    analyzer: DependencyAnalyzer,
    exporter: ArchiveExporter,
    destination: DestinationDirectory,
    dry_run: bool = False,
) -> ExportOutcome:
    """
    Analyze one target and, if it passes, export it.
    """
    report = analyzer.analyze(target, deps)
    if not report.success:
        logger.info("Skipping export of %s: %d violation(s)", target.name, len(report.violations))
        return ExportOutcome(target=target, report=report)
    if dry_run:
        return ExportOutcome(target=target, report=report)
    return exporter.export(report, deps, destination)


def run_export(
    targets: Sequence[Target],
    analyzer: DependencyAnalyzer,
    exporter: ArchiveExporter,
    destination_dir: Union[str, Path],
    progress_cb: Optional[Callable[[int, int, DependencyNode], None]] = None,
    is_cancelled: Optional[Callable[[], bool]] = None,
    max_workers: int = 1,
    dry_run: bool = False,
) -> List[ExportOutcome]:
    """
    Runs analyze + export for each (target, deps) pair.

    One failing target never stops the others. Results come back in input
    order. With max_workers > 1 targets run on a thread pool; they share only
    the read-only inputs and the destination folder.
    """
    destination = DestinationDirectory(destination_dir)
    total = len(targets)
    outcomes: List[Optional[ExportOutcome]] = [None] * total

    def _one(idx: int) -> ExportOutcome:
        target, deps = targets[idx]
        if is_cancelled and is_cancelled():
            return _cancelled_outcome(target)
        if progress_cb:
            progress_cb(idx + 1, total, target)
        return run_target(target, deps, analyzer, exporter, destination, dry_run=dry_run)

    if max_workers <= 1 or total <= 1:
        for idx in range(total):
            outcomes[idx] = _one(idx)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            for idx, outcome in enumerate(pool.map(_one, range(total))):
                outcomes[idx] = outcome

    done = [o for o in outcomes if o is not None]
    ok = sum(1 for o in done if o.archive_path)
    logger.info("Export run finished: %d/%d target(s) exported", ok, total)
    return done
