from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

KIND_COMPOSITE = "composite"
KIND_SHADER = "shader"
KIND_TEXTURE = "texture"
KIND_LIBRARY = "library"
KIND_OTHER = "other"

NODE_KINDS = (KIND_COMPOSITE, KIND_SHADER, KIND_TEXTURE, KIND_LIBRARY, KIND_OTHER)

KIND_LABELS = {
    KIND_COMPOSITE: "Composite",
    KIND_SHADER: "Shader",
    KIND_TEXTURE: "Texture",
    KIND_LIBRARY: "Library",
    KIND_OTHER: "Asset",
}


@dataclass(frozen=True)
class ComponentRef:
    type_name: str  # fully qualified, e.g. "UnityEngine.MeshRenderer"
    namespace: str  # "" when the type is declared in the global namespace

    @classmethod
    def parse(cls, full_name: str) -> "ComponentRef":
        full_name = (full_name or "").strip()
        ns, _, _ = full_name.rpartition(".")
        return cls(type_name=full_name, namespace=ns)


@dataclass(frozen=True)
class DependencyNode:
    uid: str
    name: str
    kind: str           # composite | shader | texture | library | other ("" = unresolved)
    path: str = ""      # project-relative asset path ("" for runtime-only nodes)
    width: int = 0      # textures only
    height: int = 0
    components: Tuple[ComponentRef, ...] = ()
    children: Tuple["DependencyNode", ...] = ()  # composites only
    active: bool = True  # inactive children are still validated

    @property
    def key(self) -> str:
        """
        Identity used by ignore-sets.
        """
        return self.uid or f"{self.kind}:{self.path}:{self.name}"

    @property
    def kind_label(self) -> str:
        return KIND_LABELS.get(self.kind, "Object")


@dataclass(frozen=True)
class ReportEntry:
    message: str
    severity: str  # ERROR | INFO
    node: DependencyNode
    node_kind_label: str
    code: str = ""  # stable short identifier (e.g. UNSUPPORTED_LIBRARY)


class Report:
    """
    Outcome of one analysis pass over one root target.

    Violations and statistics are append-only; `success` is derived from the
    violation list so it can never flip back to True.
    """

    def __init__(self, target: DependencyNode):
        self.target = target
        self._violations: List[ReportEntry] = []
        self._stats: List[ReportEntry] = []
        self._ignored: Set[str] = set()

    @property
    def success(self) -> bool:
        return not self._violations

    @property
    def violations(self) -> Tuple[ReportEntry, ...]:
        return tuple(self._violations)

    @property
    def stats(self) -> Tuple[ReportEntry, ...]:
        return tuple(self._stats)

    @property
    def ignored(self) -> frozenset:
        return frozenset(self._ignored)

    def error(self, message: str, node: DependencyNode, code: str = "", kind_label: Optional[str] = None) -> ReportEntry:
        entry = ReportEntry(
            message=message,
            severity="ERROR",
            node=node,
            node_kind_label=kind_label or node.kind_label,
            code=code,
        )
        self._violations.append(entry)
        return entry

    def stat(self, message: str, node: DependencyNode, code: str = "", kind_label: Optional[str] = None) -> ReportEntry:
        entry = ReportEntry(
            message=message,
            severity="INFO",
            node=node,
            node_kind_label=kind_label or node.kind_label,
            code=code,
        )
        self._stats.append(entry)
        return entry

    def mark_ignored(self, node: DependencyNode) -> None:
        self._ignored.add(node.key)

    def is_ignored(self, node: DependencyNode) -> bool:
        return node.key in self._ignored

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Report):
            return NotImplemented
        return (
            self.target == other.target
            and self._violations == other._violations
            and self._stats == other._stats
            and self._ignored == other._ignored
        )

    def __repr__(self) -> str:
        return (
            f"Report(target={self.target.name!r}, success={self.success}, "
            f"violations={len(self._violations)}, stats={len(self._stats)}, ignored={len(self._ignored)})"
        )


@dataclass(frozen=True)
class ArchivePlanItem:
    node: DependencyNode
    src: str           # absolute source file
    arcname: str       # entry name inside the archive
    meta_src: str
    meta_arcname: str


@dataclass(frozen=True)
class ArchivedEntry:
    arcname: str
    src: str
    size_bytes: int
    mtime: float
    digest: Optional[str] = None


@dataclass(frozen=True)
class ExportOutcome:
    target: DependencyNode
    report: Report
    archive_path: Optional[str] = None
    error: Optional[str] = None
    entries: Tuple[ArchivedEntry, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None and self.report.success
