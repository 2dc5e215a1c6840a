"""Detect unsafe blocks, unsafe functions, unsafe traits and unsafe impls."""

from __future__ import annotations

from typing import List

from seclint.diagnostics import Diagnostic
from seclint.hir import BlockCheckMode, BlockExpr, FnItem, ImplItem, Node, Safety, TraitItem
from seclint.severity import Severity

from . import LintContext, Rule, build_diagnostic


class UnsafeRegionRule:
    """Flag regions where the user opts out of memory-safety checks."""

    id = "security_unsafe_usage"
    severity = Severity.DENY
    description = (
        "Detects usage of unsafe blocks, unsafe functions, unsafe traits and unsafe implementations."
    )

    def matches(self, node: Node, context: LintContext) -> List[Diagnostic]:
        if isinstance(node, BlockExpr):
            # Blocks the compiler marks unsafe on its own are not the user's doing.
            if node.block.rules == BlockCheckMode.UNSAFE_USER:
                return [self._report(context, node, "Usage of unsafe block detected.", "block")]
            return []

        if isinstance(node, FnItem):
            if node.safety == Safety.UNSAFE:
                return [self._report(context, node, "Unsafe function detected.", "function")]
            return []

        if isinstance(node, TraitItem):
            if node.safety == Safety.UNSAFE:
                return [self._report(context, node, "Unsafe trait detected.", "trait")]
            return []

        if isinstance(node, ImplItem):
            # Only trait impls carry a safety marker.
            if node.of_trait is not None and node.safety == Safety.UNSAFE:
                return [self._report(context, node, "Unsafe impl detected.", "impl")]
            return []

        return []

    def _report(self, context: LintContext, node: Node, message: str, category: str) -> Diagnostic:
        return build_diagnostic(self, context, node.span, message, category)


def get_rule() -> Rule:
    return UnsafeRegionRule()
