from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from assetpack.config import APP_NAME, APP_VERSION, HASH_ALGO_DEFAULT, MANIFEST_NAME
from assetpack.core.analyzer import DependencyAnalyzer
from assetpack.core.archive import ArchiveExporter
from assetpack.core.graph import AssetGraph, load_graph
from assetpack.core.manifest import build_manifest_dict, write_manifest_json
from assetpack.core.pipeline import Target, run_export
from assetpack.core.planner import plan_archive
from assetpack.core.profiles import PolicyProfile, default_profile, ensure_default_profiles_on_disk, load_profile
from assetpack.core.reporting import format_summary
from assetpack.errors import AssetPackError
from assetpack.log import setup_logging
from assetpack.models import ExportOutcome

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_POLICY_VIOLATION = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetpack",
        description=f"{APP_NAME} - validate asset dependencies and export them as archives",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute", required=True)

    def _common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--graph", required=True, help="Asset graph JSON exported by the editor")
        p.add_argument(
            "--target",
            action="append",
            default=None,
            help="Root target name or id (repeatable; default: every root in the graph)",
        )
        p.add_argument("--profile-file", default=None, help="Policy profile JSON (default: built-in Unity profile)")
        p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    analyze_parser = subparsers.add_parser("analyze", help="Validate targets without exporting")
    _common(analyze_parser)

    export_parser = subparsers.add_parser("export", help="Validate and export targets")
    _common(export_parser)
    export_parser.add_argument("--project-root", required=True, help="Folder that contains the Assets folder")
    export_parser.add_argument("--out", default=None, help="Destination folder (default: <project-root>/Exports)")
    export_parser.add_argument("--workers", type=int, default=1, help="Targets exported in parallel")
    export_parser.add_argument("--dry-run", action="store_true", help="Print the archive plan, write nothing")
    export_parser.add_argument("--manifest", action="store_true", help=f"Write {MANIFEST_NAME} next to the archives")
    export_parser.add_argument("--no-hash", action="store_true", help="Skip file digests in the manifest")

    profiles_parser = subparsers.add_parser("profiles", help="Write the default profiles as JSON")
    profiles_parser.add_argument("--dir", required=True, help="Folder to write the profiles into")
    profiles_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser


def _load_profile(path: Optional[str]) -> PolicyProfile:
    if not path:
        return default_profile()
    return load_profile(path)


def _select_targets(graph: AssetGraph, names: Optional[Sequence[str]]) -> List[Target]:
    if names:
        roots = []
        for name in names:
            node = graph.find(name)
            if node is None:
                raise AssetPackError(f"Target not found in graph: {name}")
            roots.append(node)
    else:
        roots = graph.roots()

    return [(root, graph.collect_dependencies(root.uid)) for root in roots]


def _exit_code(outcomes: Sequence[ExportOutcome]) -> int:
    if all(o.ok for o in outcomes):
        return EXIT_SUCCESS
    return EXIT_POLICY_VIOLATION


def cmd_analyze(args: argparse.Namespace) -> int:
    profile = _load_profile(args.profile_file)
    graph = load_graph(args.graph)
    targets = _select_targets(graph, args.target)

    analyzer = DependencyAnalyzer(profile)
    outcomes = [ExportOutcome(target=t, report=analyzer.analyze(t, deps)) for t, deps in targets]

    print(format_summary(outcomes))
    return _exit_code(outcomes)


def cmd_export(args: argparse.Namespace) -> int:
    profile = _load_profile(args.profile_file)
    graph = load_graph(args.graph)
    targets = _select_targets(graph, args.target)

    project_root = Path(args.project_root).resolve()
    assets_root = project_root / profile.assets_prefix.strip("/") if profile.assets_prefix else project_root
    destination = Path(args.out).resolve() if args.out else project_root / profile.output_dir
    # digests only end up in the manifest
    hash_algo = HASH_ALGO_DEFAULT if args.manifest and not args.no_hash else None

    analyzer = DependencyAnalyzer(profile)
    exporter = ArchiveExporter(str(assets_root), profile, hash_algo=hash_algo)

    def _progress(i: int, total: int, target) -> None:
        logger.info("%d/%d  %s", i, total, target.name)

    outcomes = run_export(
        targets,
        analyzer,
        exporter,
        destination,
        progress_cb=_progress,
        max_workers=max(1, args.workers),
        dry_run=args.dry_run,
    )

    if args.dry_run:
        for outcome, (_, deps) in zip(outcomes, targets):
            if not outcome.report.success:
                continue
            plan, skipped = plan_archive(outcome.report, deps, str(assets_root), profile)
            print(f"[{outcome.target.name}] -> {exporter.archive_path_for(outcome.target, destination)}")
            for item in plan:
                print(f"  + {item.arcname}")
                print(f"  + {item.meta_arcname}")
            for s in skipped:
                print(f"  - {s.node.name} ({s.code})")
        print()

    print(format_summary(outcomes))

    if args.manifest and not args.dry_run:
        manifest = build_manifest_dict(
            outcomes,
            tool_name=APP_NAME,
            tool_version=APP_VERSION,
            profile=profile.name,
            destination_dir=str(destination),
            hash_algo=hash_algo,
        )
        written = write_manifest_json(manifest, str(destination / MANIFEST_NAME))
        logger.info("Manifest written: %s", written)

    return _exit_code(outcomes)


def cmd_profiles(args: argparse.Namespace) -> int:
    for name, path in ensure_default_profiles_on_disk(args.dir).items():
        print(f"{name}: {path}")
    return EXIT_SUCCESS


COMMANDS = {
    "analyze": cmd_analyze,
    "export": cmd_export,
    "profiles": cmd_profiles,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        return COMMANDS[args.command](args)
    except AssetPackError as e:
        logger.error("%s", e)
        return EXIT_RUNTIME_ERROR
    except OSError as e:
        logger.error("I/O error: %s", e)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
