from __future__ import annotations

from typing import List, Sequence

from assetpack.models import ExportOutcome, ReportEntry


def format_entry(entry: ReportEntry) -> str:
    return f"  {entry.node_kind_label}: [{entry.node.name}]  {entry.severity.title()}: [{entry.message}]"


def format_outcome(outcome: ExportOutcome) -> str:
    """
    Human readable block for one target. Not a stable format.
    """
    report = outcome.report
    name = outcome.target.name
    lines: List[str] = []

    if not report.success:
        lines.append(f"[{name}] {len(report.violations)} Error(s):")
        lines.extend(format_entry(e) for e in report.violations)
        return "\n".join(lines)

    if outcome.archive_path:
        lines.append(f"[{name}] Export complete. {'Stats:' if report.stats else ''}".rstrip())
    else:
        lines.append(f"[{name}] Validation passed.")
    lines.extend(format_entry(e) for e in report.stats)
    if outcome.archive_path:
        lines.append(f"  Archive: {outcome.archive_path}")
    return "\n".join(lines)


def format_summary(outcomes: Sequence[ExportOutcome]) -> str:
    blocks = [format_outcome(o) for o in outcomes]
    ok = sum(1 for o in outcomes if o.archive_path)
    blocks.append(f"{ok}/{len(outcomes)} target(s) exported.")
    return "\n\n".join(blocks)
