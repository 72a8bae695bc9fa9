from __future__ import annotations

import logging
from typing import Optional, Sequence

from assetpack.core import policy
from assetpack.core.profiles import PolicyProfile, default_profile
from assetpack.models import (
    KIND_COMPOSITE,
    KIND_LIBRARY,
    KIND_SHADER,
    KIND_TEXTURE,
    DependencyNode,
    Report,
)

logger = logging.getLogger(__name__)


class DependencyAnalyzer:
    """
    Applies the policy rules to a flat dependency list.

    The pass is exhaustive: every node is visited in the order given and all
    violations are collected. Nothing here raises for odd input; nodes with
    an unknown kind are skipped.
    """

    def __init__(self, profile: Optional[PolicyProfile] = None):
        self.profile = profile or default_profile()

    def analyze(self, target: DependencyNode, deps: Sequence[DependencyNode]) -> Report:
        report = Report(target)

        for node in deps:
            if node is None:
                continue

            # -------------------------
            # Rule: built-in components only
            # -------------------------
            if node.kind == KIND_COMPOSITE:
                self._analyze_composite(report, node)

            # -------------------------
            # Rule: shaders (not inspected)
            # -------------------------
            elif node.kind == KIND_SHADER:
                verdict = policy.check_shader(node)
                if not verdict.allowed:
                    report.error(verdict.reason or "", node, code=verdict.code)

            # -------------------------
            # Stat: texture dimensions
            # -------------------------
            elif node.kind == KIND_TEXTURE:
                report.stat(policy.texture_statistic(node), node, code="TEXTURE_SIZE")

            # -------------------------
            # Rule: library whitelist
            # -------------------------
            elif node.kind == KIND_LIBRARY:
                verdict = policy.check_library(node, self.profile.library_whitelist)
                if verdict.allowed:
                    # Whitelisted libraries ship with the runtime; keep them out of the archive
                    report.mark_ignored(node)
                    logger.debug("Ignoring whitelisted library %s", policy.library_file_name(node))
                else:
                    report.error(verdict.reason or "", node, code=verdict.code)

            else:
                logger.debug("Skipping %r: kind %r not validated", node.name, node.kind)

        logger.info(
            "Analyzed %s: %d dependencies, %d violation(s), %d stat(s), %d ignored",
            target.name,
            len(deps),
            len(report.violations),
            len(report.stats),
            len(report.ignored),
        )
        return report

    def _analyze_composite(self, report: Report, node: DependencyNode) -> None:
        for owner, component in policy.iter_components(node):
            if component is None:
                continue
            if not owner.active:
                logger.debug("Checking %s on inactive child %r", component.type_name, owner.name)
            verdict = policy.check_component(component, owner, self.profile.builtin_namespace)
            if not verdict.allowed:
                report.error(verdict.reason or "", owner, code=verdict.code)
