from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import AbstractSet, Iterator, Optional, Tuple

from assetpack.models import ComponentRef, DependencyNode

LIBRARY_HINT = (
    "This usually happens when using a custom script or when using a script that is "
    "not compatible with all platforms (i.e. a script that is only compatible with "
    "HoloLens but not iOS)."
)


@dataclass(frozen=True)
class Verdict:
    allowed: bool
    code: str = ""
    reason: Optional[str] = None


ALLOWED = Verdict(True)


def is_builtin_namespace(namespace: str, builtin_namespace: str) -> bool:
    if not namespace or not builtin_namespace:
        return False
    return namespace == builtin_namespace or namespace.startswith(builtin_namespace + ".")


def iter_components(node: DependencyNode) -> Iterator[Tuple[DependencyNode, ComponentRef]]:
    """
    Yields (owner, component) for the node and every descendant, inactive
    children included. Depth-first, declaration order.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        for comp in current.components:
            yield current, comp
        stack.extend(reversed(current.children))


def check_component(component: ComponentRef, owner: DependencyNode, builtin_namespace: str) -> Verdict:
    if is_builtin_namespace(component.namespace, builtin_namespace):
        return ALLOWED
    return Verdict(
        allowed=False,
        code="CUSTOM_COMPONENT",
        reason=(
            f"Custom Component of type {component.type_name or '<unknown>'} on '{owner.name}' not allowed. "
            f"Only {builtin_namespace} Components are allowed."
        ),
    )


def library_file_name(node: DependencyNode) -> str:
    if node.path:
        return posixpath.basename(node.path.replace("\\", "/"))
    return node.name


def check_library(node: DependencyNode, whitelist: AbstractSet[str]) -> Verdict:
    name = library_file_name(node)
    if name in whitelist:
        return ALLOWED
    return Verdict(
        allowed=False,
        code="UNSUPPORTED_LIBRARY",
        reason=f"Unsupported dll : {name}. {LIBRARY_HINT}",
    )


def check_shader(node: DependencyNode) -> Verdict:
    # Shader includes are not inspected yet; every shader passes.
    return ALLOWED


def texture_statistic(node: DependencyNode) -> str:
    return f"{node.width}x{node.height}"
