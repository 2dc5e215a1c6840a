"""Rule contract and the read-only context rules are evaluated against."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Protocol

from seclint.diagnostics import Diagnostic
from seclint.hir import CompilationUnit, Expr, LangItem, Node, PathExpr, TraitRef
from seclint.severity import Severity
from seclint.span import DIRECT, Span, SpanClassifier


class Rule(Protocol):
    """Protocol implemented by all rules.

    ``matches`` must be total over every node kind and free of side effects;
    an empty list means the node does not match.
    """

    id: str
    severity: Severity
    description: str

    def matches(self, node: Node, context: "LintContext") -> List[Diagnostic]:
        """Return the diagnostics ``node`` produces under this rule."""


@dataclass(frozen=True)
class LintContext:
    """Bundle the host facilities shared across rules."""

    unit: CompilationUnit
    classifier: SpanClassifier = field(default_factory=SpanClassifier)

    def def_path_str(self, expr: Expr) -> Optional[str]:
        """Resolve a callee expression to its fully qualified path, if any."""

        if not isinstance(expr, PathExpr):
            return None
        return self.unit.def_path_str(expr.def_id)

    def lang_item(self, trait_ref: TraitRef) -> Optional[LangItem]:
        return self.unit.lang_item_for(trait_ref.def_id)


def build_diagnostic(
    rule: Rule,
    context: LintContext,
    span: Span,
    message: str,
    category: Optional[str] = None,
) -> Diagnostic:
    """Create a diagnostic for ``rule`` at the user-visible site of ``span``.

    The reported span carries no origin: it is a plain source location.
    """

    site = context.classifier.source_callsite(span)
    return Diagnostic(
        rule=rule.id,
        severity=rule.severity,
        span=replace(site, origin=DIRECT),
        message=message,
        category=category,
    )
