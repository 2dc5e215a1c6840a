"""Read-only model of the host compiler's resolved semantic tree.

Nodes form a tagged union over expressions, statements and items. Every node
is a frozen dataclass carrying a kind-specific payload and a ``span``; the
engine never mutates a node or keeps one beyond the visit that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .span import Span


class Safety(str, Enum):
    SAFE = "safe"
    UNSAFE = "unsafe"


class BlockCheckMode(str, Enum):
    """Whether a block opts out of safety checks, and who asked for it."""

    DEFAULT = "default"
    UNSAFE_USER = "unsafe_user"
    UNSAFE_COMPILER = "unsafe_compiler"


class ClosureKind(str, Enum):
    CLOSURE = "closure"
    COROUTINE = "coroutine"


class PatKind(str, Enum):
    WILD = "wild"
    BINDING = "binding"
    TUPLE = "tuple"
    STRUCT = "struct"
    REF = "ref"
    LITERAL = "literal"


class LangItem(str, Enum):
    """Lang items the rules care about."""

    INDEX = "index"
    INDEX_MUT = "index_mut"


DEFAULT_LANG_ITEMS: Dict[LangItem, str] = {
    LangItem.INDEX: "core::ops::Index",
    LangItem.INDEX_MUT: "core::ops::IndexMut",
}


# ----------------------------------------------------------------------
# Payload helpers
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Pattern:
    kind: PatKind
    span: Span
    name: Optional[str] = None
    subpatterns: Tuple["Pattern", ...] = ()

    @property
    def is_wild(self) -> bool:
        return self.kind == PatKind.WILD


@dataclass(frozen=True)
class TypeRef:
    text: str
    span: Span


@dataclass(frozen=True)
class Param:
    """A closure or function parameter.

    ``ty_span`` is ``None`` or empty when no type was written; the host may
    also report an inferred type by reusing the pattern span.
    """

    pat: Pattern
    ty_span: Optional[Span] = None


@dataclass(frozen=True)
class TraitRef:
    path: str
    span: Span
    def_id: Optional[str] = None


@dataclass(frozen=True)
class Block:
    stmts: Tuple["Stmt", ...]
    span: Span
    expr: Optional["Expr"] = None
    rules: BlockCheckMode = BlockCheckMode.DEFAULT


# ----------------------------------------------------------------------
# Node kinds
# ----------------------------------------------------------------------
class Expr:
    """Marker base for expression nodes."""

    span: Span


class Stmt:
    """Marker base for statement nodes."""

    span: Span


class Item:
    """Marker base for item (declaration) nodes."""

    span: Span


Node = Union[Expr, Stmt, Item]


@dataclass(frozen=True)
class Literal(Expr):
    value: Any
    span: Span


@dataclass(frozen=True)
class PathExpr(Expr):
    segments: Tuple[str, ...]
    span: Span
    def_id: Optional[str] = None


@dataclass(frozen=True)
class Unary(Expr):
    op: str
    operand: Expr
    span: Span


@dataclass(frozen=True)
class Binary(Expr):
    op: str
    lhs: Expr
    rhs: Expr
    span: Span


@dataclass(frozen=True)
class AddrOf(Expr):
    operand: Expr
    span: Span
    mutable: bool = False


@dataclass(frozen=True)
class FieldAccess(Expr):
    target: Expr
    name: str
    span: Span


@dataclass(frozen=True)
class Call(Expr):
    func: Expr
    args: Tuple[Expr, ...]
    span: Span


@dataclass(frozen=True)
class MethodCall(Expr):
    receiver: Expr
    method: str
    args: Tuple[Expr, ...]
    span: Span


@dataclass(frozen=True)
class Index(Expr):
    target: Expr
    index: Expr
    span: Span


@dataclass(frozen=True)
class RangeExpr(Expr):
    """``a..b``, ``a..``, ``..b``, ``..`` and their inclusive forms."""

    span: Span
    start: Optional[Expr] = None
    end: Optional[Expr] = None
    inclusive: bool = False


@dataclass(frozen=True)
class Closure(Expr):
    params: Tuple[Param, ...]
    body: Expr
    span: Span
    kind: ClosureKind = ClosureKind.CLOSURE


@dataclass(frozen=True)
class BlockExpr(Expr):
    block: Block
    span: Span


@dataclass(frozen=True)
class If(Expr):
    cond: Expr
    then: BlockExpr
    span: Span
    otherwise: Optional[Expr] = None


@dataclass(frozen=True)
class ArrayExpr(Expr):
    elements: Tuple[Expr, ...]
    span: Span


@dataclass(frozen=True)
class Return(Expr):
    span: Span
    value: Optional[Expr] = None


@dataclass(frozen=True)
class LetStmt(Stmt):
    pat: Pattern
    span: Span
    ty: Optional[TypeRef] = None
    init: Optional[Expr] = None
    otherwise: Optional[BlockExpr] = None


@dataclass(frozen=True)
class ExprStmt(Stmt):
    expr: Expr
    span: Span
    semi: bool = True


@dataclass(frozen=True)
class ItemStmt(Stmt):
    item: Item
    span: Span


@dataclass(frozen=True)
class FnItem(Item):
    name: str
    span: Span
    safety: Safety = Safety.SAFE
    params: Tuple[Param, ...] = ()
    body: Optional[BlockExpr] = None


@dataclass(frozen=True)
class TraitItem(Item):
    name: str
    span: Span
    safety: Safety = Safety.SAFE
    items: Tuple[Item, ...] = ()


@dataclass(frozen=True)
class ImplItem(Item):
    self_ty: str
    span: Span
    of_trait: Optional[TraitRef] = None
    safety: Safety = Safety.SAFE
    items: Tuple[Item, ...] = ()


@dataclass(frozen=True)
class StructItem(Item):
    name: str
    span: Span


@dataclass(frozen=True)
class ModItem(Item):
    name: str
    span: Span
    items: Tuple[Item, ...] = ()


@dataclass(frozen=True)
class ConstItem(Item):
    name: str
    span: Span
    ty: Optional[TypeRef] = None
    value: Optional[Expr] = None


@dataclass(frozen=True)
class TypeAliasItem(Item):
    name: str
    span: Span
    ty: Optional[TypeRef] = None


@dataclass
class CompilationUnit:
    """Root of one crate's tree plus the host's resolution tables."""

    name: str
    items: Tuple[Item, ...] = ()
    definitions: Dict[str, str] = field(default_factory=dict)
    lang_items: Dict[LangItem, str] = field(default_factory=lambda: dict(DEFAULT_LANG_ITEMS))

    def def_path_str(self, def_id: Optional[str]) -> Optional[str]:
        if def_id is None:
            return None
        return self.definitions.get(def_id)

    def lang_item_for(self, def_id: Optional[str]) -> Optional[LangItem]:
        if def_id is None:
            return None
        for item, item_def_id in self.lang_items.items():
            if item_def_id == def_id:
                return item
        return None
