"""Pre-order traversal of a compilation unit, offering each node to every rule."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from .diagnostics import Diagnostic, DiagnosticSink
from .errors import MatchError
from .hir import (
    AddrOf,
    ArrayExpr,
    Binary,
    BlockExpr,
    Call,
    Closure,
    CompilationUnit,
    ConstItem,
    ExprStmt,
    FieldAccess,
    FnItem,
    If,
    ImplItem,
    Index,
    ItemStmt,
    LetStmt,
    Literal,
    MethodCall,
    ModItem,
    Node,
    PathExpr,
    RangeExpr,
    Return,
    StructItem,
    TraitItem,
    TypeAliasItem,
    Unary,
)
from .rules import LintContext

if TYPE_CHECKING:  # pragma: no cover
    from .registry import RegisteredRule, RuleRegistry

logger = logging.getLogger(__name__)


def _present(*nodes: Optional[Node]) -> Tuple[Node, ...]:
    return tuple(node for node in nodes if node is not None)


def iter_children(node: Node) -> Tuple[Node, ...]:
    """Return the direct child nodes of ``node`` in source order.

    Raises ``MatchError`` for a node kind outside the tree model.
    """

    # Expressions
    if isinstance(node, (Literal, PathExpr)):
        return ()
    if isinstance(node, (Unary, AddrOf)):
        return (node.operand,)
    if isinstance(node, Binary):
        return (node.lhs, node.rhs)
    if isinstance(node, FieldAccess):
        return (node.target,)
    if isinstance(node, Call):
        return (node.func,) + tuple(node.args)
    if isinstance(node, MethodCall):
        return (node.receiver,) + tuple(node.args)
    if isinstance(node, Index):
        return (node.target, node.index)
    if isinstance(node, RangeExpr):
        return _present(node.start, node.end)
    if isinstance(node, Closure):
        return (node.body,)
    if isinstance(node, BlockExpr):
        return tuple(node.block.stmts) + _present(node.block.expr)
    if isinstance(node, If):
        return _present(node.cond, node.then, node.otherwise)
    if isinstance(node, ArrayExpr):
        return tuple(node.elements)
    if isinstance(node, Return):
        return _present(node.value)

    # Statements
    if isinstance(node, LetStmt):
        return _present(node.init, node.otherwise)
    if isinstance(node, ExprStmt):
        return (node.expr,)
    if isinstance(node, ItemStmt):
        return (node.item,)

    # Items
    if isinstance(node, FnItem):
        return _present(node.body)
    if isinstance(node, (TraitItem, ImplItem, ModItem)):
        return tuple(node.items)
    if isinstance(node, ConstItem):
        return _present(node.value)
    if isinstance(node, (StructItem, TypeAliasItem)):
        return ()

    raise MatchError(f"unsupported node kind {type(node).__name__}")


class SyntaxTreeWalker:
    """Visit every node of a unit exactly once, in deterministic pre-order."""

    def iter_nodes(self, unit: CompilationUnit) -> Iterator[Node]:
        stack: List[Node] = list(reversed(unit.items))
        while stack:
            node = stack.pop()
            yield node
            try:
                children = iter_children(node)
            except MatchError as exc:
                logger.warning("Skipping children of %s: %s", type(node).__name__, exc)
                continue
            stack.extend(reversed(children))

    def traverse(
        self,
        unit: CompilationUnit,
        registry: "RuleRegistry",
        context: Optional[LintContext] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> List[Diagnostic]:
        """Offer every node to every enabled rule and return the diagnostics in emission order."""

        if context is None:
            context = LintContext(unit=unit)
        if sink is None:
            sink = DiagnosticSink()
        entries = registry.enabled()
        for node in self.iter_nodes(unit):
            for entry in entries:
                self._offer(entry, node, context, sink)
        return list(sink.diagnostics)

    def _offer(self, entry: "RegisteredRule", node: Node, context: LintContext, sink: DiagnosticSink) -> None:
        rule = entry.rule
        try:
            diagnostics = list(rule.matches(node, context) or ())
            if entry.disabled_categories:
                diagnostics = [d for d in diagnostics if d.category not in entry.disabled_categories]
            if entry.severity != rule.severity:
                diagnostics = [replace(diagnostic, severity=entry.severity) for diagnostic in diagnostics]
            sink.extend(diagnostics)
        except MatchError as exc:
            logger.debug("Rule %s could not classify %s: %s", rule.id, type(node).__name__, exc)
        except Exception:  # pylint: disable=broad-except
            logger.warning("Rule %s failed on %s", rule.id, type(node).__name__, exc_info=True)
