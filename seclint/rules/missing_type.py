"""Detect missing explicit type annotations on let bindings and closure parameters."""

from __future__ import annotations

from typing import List

from seclint.diagnostics import Diagnostic
from seclint.hir import Closure, ClosureKind, LetStmt, Node, Param
from seclint.severity import Severity

from . import LintContext, Rule, build_diagnostic

LET_BINDING = "let_binding"
CLOSURE_PARAM = "closure_param"

LET_BINDING_MESSAGE = "Missing explicit type annotation on let binding."
CLOSURE_PARAM_MESSAGE = "Closure parameter missing explicit type annotation."


class MissingAnnotationRule:
    """Flag ``let x = 5;`` and ``|a, b| a + b``, but never ``_`` patterns."""

    id = "missing_type"
    severity = Severity.WARN
    description = "Detects missing explicit type annotations on let bindings and closure parameters."

    def matches(self, node: Node, context: LintContext) -> List[Diagnostic]:
        if isinstance(node, LetStmt):
            return self._check_let(node, context)
        if isinstance(node, Closure):
            return self._check_closure(node, context)
        return []

    # ------------------------------------------------------------------
    # Let bindings
    # ------------------------------------------------------------------
    def _check_let(self, stmt: LetStmt, context: LintContext) -> List[Diagnostic]:
        if stmt.pat.is_wild:
            return []
        # Derives, async_trait and other macros write bindings the user cannot annotate.
        if context.classifier.from_expansion(stmt.span):
            return []
        # for loops, `?` and async lowering introduce their own bindings.
        if context.classifier.desugaring_kind(stmt.span) is not None:
            return []
        if stmt.ty is not None:
            return []
        return [build_diagnostic(self, context, stmt.pat.span, LET_BINDING_MESSAGE, LET_BINDING)]

    # ------------------------------------------------------------------
    # Closure parameters
    # ------------------------------------------------------------------
    def _check_closure(self, closure: Closure, context: LintContext) -> List[Diagnostic]:
        if context.classifier.from_expansion(closure.span):
            return []
        if closure.kind == ClosureKind.COROUTINE:
            return []

        diagnostics: List[Diagnostic] = []
        for param in closure.params:
            if param.pat.is_wild:
                continue
            if self._is_inferred(param):
                diagnostics.append(
                    build_diagnostic(self, context, param.pat.span, CLOSURE_PARAM_MESSAGE, CLOSURE_PARAM)
                )
        return diagnostics

    @staticmethod
    def _is_inferred(param: Param) -> bool:
        ty_span = param.ty_span
        return ty_span is None or ty_span.is_empty or ty_span == param.pat.span


def get_rule() -> Rule:
    return MissingAnnotationRule()
