"""Detect indexing and slicing operations, and implementations of indexing traits."""

from __future__ import annotations

from typing import List, Tuple

from seclint.diagnostics import Diagnostic
from seclint.hir import Expr, ImplItem, Index, LangItem, Literal, Node, RangeExpr
from seclint.severity import Severity

from . import LintContext, Rule, build_diagnostic

INDEXING = "indexing"
SLICING = "slicing"
INDEX_IMPL = "index_impl"

INDEXING_MESSAGE = "Usage of indexing operation detected."
SLICING_MESSAGE = "Usage of slicing operation detected."
INDEX_IMPL_MESSAGE = "Implementation of Index/IndexMut trait detected."

INDEX_TRAITS = (LangItem.INDEX, LangItem.INDEX_MUT)


class IndexingOperationRule:
    """Flag ``array[index]``, ``array[a..b]`` and ``impl Index for ...``."""

    id = "security_indexing_usage"
    severity = Severity.DENY
    description = "Detects usage of indexing and slicing operations."

    def matches(self, node: Node, context: LintContext) -> List[Diagnostic]:
        if isinstance(node, Index):
            category, message = self.classify_index(node.index)
            return [build_diagnostic(self, context, node.span, message, category)]

        if isinstance(node, ImplItem) and node.of_trait is not None:
            if context.lang_item(node.of_trait) in INDEX_TRAITS:
                return [build_diagnostic(self, context, node.span, INDEX_IMPL_MESSAGE, INDEX_IMPL)]

        return []

    @staticmethod
    def classify_index(index: Expr) -> Tuple[str, str]:
        """Return the category and message for an index operand."""

        # array[0]
        if isinstance(index, Literal):
            return INDEXING, INDEXING_MESSAGE
        # array[1..], array[..], array[a..b]
        if isinstance(index, RangeExpr):
            return SLICING, SLICING_MESSAGE
        # array[i]
        return INDEXING, INDEXING_MESSAGE


def get_rule() -> Rule:
    return IndexingOperationRule()
