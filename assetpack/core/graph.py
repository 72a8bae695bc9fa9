from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from assetpack.errors import GraphError
from assetpack.models import KIND_COMPOSITE, NODE_KINDS, ComponentRef, DependencyNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphEntry:
    node: DependencyNode
    dependencies: Tuple[str, ...]
    root: bool = False


class AssetGraph:
    """
    Asset graph exported by the host editor: nodes keyed by id, each with an
    ordered list of outgoing dependency edges.
    """

    def __init__(self, entries: List[GraphEntry]):
        self._order: List[str] = []
        self._entries: Dict[str, GraphEntry] = {}
        for e in entries:
            uid = e.node.uid
            if uid in self._entries:
                raise GraphError(f"Duplicate node id: {uid!r}")
            self._entries[uid] = e
            self._order.append(uid)

    def __len__(self) -> int:
        return len(self._entries)

    def node(self, uid: str) -> DependencyNode:
        return self._entries[uid].node

    def find(self, name_or_id: str) -> Optional[DependencyNode]:
        if name_or_id in self._entries:
            return self._entries[name_or_id].node
        for uid in self._order:
            n = self._entries[uid].node
            if n.name == name_or_id:
                return n
        return None

    def roots(self) -> List[DependencyNode]:
        marked = [self._entries[u].node for u in self._order if self._entries[u].root]
        if marked:
            return marked
        return [self._entries[u].node for u in self._order if self._entries[u].node.kind == KIND_COMPOSITE]

    def collect_dependencies(self, root_id: str) -> List[DependencyNode]:
        """
        Flat, ordered dependency list for one root: depth-first pre-order,
        root first, each node once. Cycles are fine.
        """
        if root_id not in self._entries:
            raise KeyError(root_id)

        out: List[DependencyNode] = []
        seen: Set[str] = set()
        stack = [root_id]
        while stack:
            uid = stack.pop()
            if uid in seen:
                continue
            entry = self._entries.get(uid)
            if entry is None:
                logger.warning("Dependency %r referenced but not in graph; skipped", uid)
                seen.add(uid)
                continue
            seen.add(uid)
            out.append(entry.node)
            stack.extend(reversed([d for d in entry.dependencies if d not in seen]))
        return out


def _as_int(v: Any, field_name: str, uid: str) -> int:
    if v is None:
        return 0
    try:
        return int(v)
    except (TypeError, ValueError):
        raise GraphError(f"Node {uid!r}: '{field_name}' must be an integer") from None


def _parse_hierarchy(d: Dict[str, Any], uid: str) -> DependencyNode:
    """
    Composite node (or child) with its components and children.
    """
    comps = d.get("components") or []
    if not isinstance(comps, list):
        raise GraphError(f"Node {uid!r}: 'components' must be a list")
    children = d.get("children") or []
    if not isinstance(children, list):
        raise GraphError(f"Node {uid!r}: 'children' must be a list")

    return DependencyNode(
        uid=str(d.get("id") or ""),
        name=str(d.get("name") or ""),
        kind=KIND_COMPOSITE,
        path=str(d.get("path") or ""),
        components=tuple(ComponentRef.parse(str(c)) for c in comps if c),
        children=tuple(_parse_hierarchy(c, uid) for c in children if isinstance(c, dict)),
        active=bool(d.get("active", True)),
    )


def parse_node(d: Dict[str, Any]) -> GraphEntry:
    if not isinstance(d, dict):
        raise GraphError("Graph nodes must be JSON objects")

    uid = str(d.get("id") or "").strip()
    if not uid:
        raise GraphError(f"Node without 'id': {d.get('name')!r}")

    kind = str(d.get("kind") or "").strip().lower()
    # Unknown kinds are kept; the analyzer skips them
    if kind and kind not in NODE_KINDS:
        logger.debug("Node %r has unrecognized kind %r", uid, kind)

    deps = d.get("dependencies") or []
    if not isinstance(deps, list):
        raise GraphError(f"Node {uid!r}: 'dependencies' must be a list of ids")

    if kind == KIND_COMPOSITE:
        node = _parse_hierarchy(d, uid)
    else:
        node = DependencyNode(
            uid=uid,
            name=str(d.get("name") or ""),
            kind=kind,
            path=str(d.get("path") or ""),
            width=_as_int(d.get("width"), "width", uid),
            height=_as_int(d.get("height"), "height", uid),
        )

    return GraphEntry(
        node=node,
        dependencies=tuple(str(x) for x in deps),
        root=bool(d.get("root", False)),
    )


def graph_from_dict(d: Dict[str, Any]) -> AssetGraph:
    if not isinstance(d, dict) or not isinstance(d.get("nodes"), list):
        raise GraphError("Graph document must be an object with a 'nodes' list")
    return AssetGraph([parse_node(n) for n in d["nodes"]])


def load_graph(path: str) -> AssetGraph:
    p = Path(path)
    try:
        d = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise GraphError(f"Cannot read graph {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise GraphError(f"Graph {p} is not valid JSON: {e}") from e

    graph = graph_from_dict(d)
    logger.info("Loaded %d node(s) from %s", len(graph), p)
    return graph
