"""Load a compilation unit from a YAML or JSON tree dump.

A dump is a mapping::

    unit: main
    file: src/main.rs
    definitions: {"std::rt::begin_panic": "std::panicking::begin_panic"}
    items:
      - kind: fn
        name: main
        span: [1, 1, 4, 2]
        body: {kind: block, span: [1, 11, 4, 2], stmts: [...]}

Every node carries a ``kind``. A span is either ``[line, column, end_line,
end_column]`` in the unit's file, or a mapping with those keys plus optional
``file`` and ``origin``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from seclint.hir import (
    DEFAULT_LANG_ITEMS,
    AddrOf,
    ArrayExpr,
    Binary,
    Block,
    BlockCheckMode,
    BlockExpr,
    Call,
    Closure,
    ClosureKind,
    CompilationUnit,
    ConstItem,
    Expr,
    ExprStmt,
    FieldAccess,
    FnItem,
    If,
    ImplItem,
    Index,
    Item,
    ItemStmt,
    LangItem,
    LetStmt,
    Literal,
    MethodCall,
    ModItem,
    Param,
    PatKind,
    PathExpr,
    Pattern,
    RangeExpr,
    Return,
    Safety,
    Stmt,
    StructItem,
    TraitItem,
    TraitRef,
    TypeAliasItem,
    TypeRef,
    Unary,
)
from seclint.span import DIRECT, Desugared, DesugaringKind, MacroExpansion, Origin, Span

from .fileio import read_yaml_file


class _UnitLoader:
    """Decode nodes, resolving relative spans against ``file``."""

    def __init__(self, file: str) -> None:
        self.file = file
        self._exprs: Dict[str, Callable[[Dict[str, Any]], Expr]] = {
            "lit": self._literal,
            "path": self._path,
            "unary": lambda d: Unary(d.get("op", "!"), self.expr(d["operand"]), self.span(d["span"])),
            "binary": lambda d: Binary(
                d.get("op", "+"), self.expr(d["lhs"]), self.expr(d["rhs"]), self.span(d["span"])
            ),
            "addr_of": lambda d: AddrOf(
                self.expr(d["operand"]), self.span(d["span"]), mutable=bool(d.get("mutable", False))
            ),
            "field": lambda d: FieldAccess(self.expr(d["target"]), str(d["name"]), self.span(d["span"])),
            "call": lambda d: Call(self.expr(d["func"]), self.exprs(d.get("args")), self.span(d["span"])),
            "method_call": lambda d: MethodCall(
                self.expr(d["receiver"]), str(d["method"]), self.exprs(d.get("args")), self.span(d["span"])
            ),
            "index": lambda d: Index(self.expr(d["target"]), self.expr(d["index"]), self.span(d["span"])),
            "range": lambda d: RangeExpr(
                self.span(d["span"]),
                start=self.optional_expr(d.get("start")),
                end=self.optional_expr(d.get("end")),
                inclusive=bool(d.get("inclusive", False)),
            ),
            "closure": self._closure,
            "block": self.block_expr,
            "if": lambda d: If(
                self.expr(d["cond"]),
                self.block_expr(d["then"]),
                self.span(d["span"]),
                otherwise=self.optional_expr(d.get("else")),
            ),
            "array": lambda d: ArrayExpr(self.exprs(d.get("elements")), self.span(d["span"])),
            "return": lambda d: Return(self.span(d["span"]), value=self.optional_expr(d.get("value"))),
        }
        self._stmts: Dict[str, Callable[[Dict[str, Any]], Stmt]] = {
            "let": self._let,
            "expr": lambda d: ExprStmt(self.expr(d["expr"]), self.span(d["span"]), semi=bool(d.get("semi", True))),
            "item": lambda d: ItemStmt(self.item(d["item"]), self.span(d["span"])),
        }
        self._items: Dict[str, Callable[[Dict[str, Any]], Item]] = {
            "fn": self._fn,
            "trait": lambda d: TraitItem(
                str(d["name"]), self.span(d["span"]), safety=self._safety(d), items=self.items(d.get("items"))
            ),
            "impl": self._impl,
            "struct": lambda d: StructItem(str(d["name"]), self.span(d["span"])),
            "mod": lambda d: ModItem(str(d["name"]), self.span(d["span"]), items=self.items(d.get("items"))),
            "const": lambda d: ConstItem(
                str(d["name"]),
                self.span(d["span"]),
                ty=self.type_ref(d.get("ty")),
                value=self.optional_expr(d.get("value")),
            ),
            "type": lambda d: TypeAliasItem(str(d["name"]), self.span(d["span"]), ty=self.type_ref(d.get("ty"))),
        }

    # ------------------------------------------------------------------
    # Spans
    # ------------------------------------------------------------------
    def span(self, data: Any) -> Span:
        if isinstance(data, (list, tuple)) and len(data) == 4:
            line, column, end_line, end_column = (int(value) for value in data)
            return Span(self.file, line, column, end_line, end_column)
        if isinstance(data, dict):
            return Span(
                str(data.get("file", self.file)),
                int(data["line"]),
                int(data["column"]),
                int(data.get("end_line", data["line"])),
                int(data.get("end_column", data["column"])),
                origin=self._origin(data.get("origin")),
            )
        raise ValueError(f"Malformed span: {data!r}")

    def _origin(self, data: Any) -> Origin:
        if data is None or data == "direct":
            return DIRECT
        if not isinstance(data, dict):
            raise ValueError(f"Malformed span origin: {data!r}")
        kind = data.get("kind")
        if kind == "macro":
            return MacroExpansion(call_site=self.span(data["call_site"]), macro=str(data.get("macro", "")))
        if kind == "desugared":
            call_site = data.get("call_site")
            return Desugared(
                kind=DesugaringKind(data["desugaring"]),
                call_site=self.span(call_site) if call_site is not None else None,
            )
        raise ValueError(f"Unknown span origin kind {kind!r}")

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------
    def expr(self, data: Dict[str, Any]) -> Expr:
        return self._dispatch(self._exprs, "expression", data)

    def optional_expr(self, data: Optional[Dict[str, Any]]) -> Optional[Expr]:
        return self.expr(data) if data is not None else None

    def exprs(self, data: Optional[List[Dict[str, Any]]]) -> tuple:
        return tuple(self.expr(entry) for entry in data or ())

    def stmt(self, data: Dict[str, Any]) -> Stmt:
        return self._dispatch(self._stmts, "statement", data)

    def item(self, data: Dict[str, Any]) -> Item:
        return self._dispatch(self._items, "item", data)

    def items(self, data: Optional[List[Dict[str, Any]]]) -> tuple:
        return tuple(self.item(entry) for entry in data or ())

    def block_expr(self, data: Dict[str, Any]) -> BlockExpr:
        span = self.span(data["span"])
        block = Block(
            stmts=tuple(self.stmt(entry) for entry in data.get("stmts") or ()),
            span=span,
            expr=self.optional_expr(data.get("expr")),
            rules=BlockCheckMode(data.get("rules", BlockCheckMode.DEFAULT.value)),
        )
        return BlockExpr(block, span)

    def pattern(self, data: Dict[str, Any]) -> Pattern:
        name = data.get("name")
        kind = data.get("kind") or ("wild" if name == "_" else "binding")
        return Pattern(
            kind=PatKind(kind),
            span=self.span(data["span"]),
            name=name,
            subpatterns=tuple(self.pattern(entry) for entry in data.get("subpatterns") or ()),
        )

    def param(self, data: Dict[str, Any]) -> Param:
        ty_span = data.get("ty_span")
        if ty_span is None and data.get("ty") is not None:
            ty_span = data["ty"]["span"]
        return Param(self.pattern(data["pat"]), ty_span=self.span(ty_span) if ty_span is not None else None)

    def type_ref(self, data: Optional[Dict[str, Any]]) -> Optional[TypeRef]:
        if data is None:
            return None
        return TypeRef(str(data["text"]), self.span(data["span"]))

    def _dispatch(self, table: Dict[str, Callable[[Dict[str, Any]], Any]], category: str, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError(f"Expected a {category} mapping, got {data!r}")
        kind = data.get("kind")
        builder = table.get(kind)
        if builder is None:
            raise ValueError(f"Unknown {category} kind {kind!r}")
        try:
            return builder(data)
        except KeyError as exc:
            raise ValueError(f"{category.capitalize()} of kind {kind!r} is missing field {exc}") from exc

    def _literal(self, data: Dict[str, Any]) -> Literal:
        return Literal(data.get("value"), self.span(data["span"]))

    def _path(self, data: Dict[str, Any]) -> PathExpr:
        segments = data.get("segments")
        if segments is None:
            segments = str(data["path"]).split("::")
        return PathExpr(tuple(str(segment) for segment in segments), self.span(data["span"]), def_id=data.get("def_id"))

    def _closure(self, data: Dict[str, Any]) -> Closure:
        return Closure(
            params=tuple(self.param(entry) for entry in data.get("params") or ()),
            body=self.expr(data["body"]),
            span=self.span(data["span"]),
            kind=ClosureKind(data.get("closure_kind", ClosureKind.CLOSURE.value)),
        )

    def _let(self, data: Dict[str, Any]) -> LetStmt:
        otherwise = data.get("else")
        return LetStmt(
            pat=self.pattern(data["pat"]),
            span=self.span(data["span"]),
            ty=self.type_ref(data.get("ty")),
            init=self.optional_expr(data.get("init")),
            otherwise=self.block_expr(otherwise) if otherwise is not None else None,
        )

    def _fn(self, data: Dict[str, Any]) -> FnItem:
        body = data.get("body")
        return FnItem(
            name=str(data["name"]),
            span=self.span(data["span"]),
            safety=self._safety(data),
            params=tuple(self.param(entry) for entry in data.get("params") or ()),
            body=self.block_expr(body) if body is not None else None,
        )

    def _impl(self, data: Dict[str, Any]) -> ImplItem:
        trait = data.get("trait")
        of_trait = None
        if trait is not None:
            of_trait = TraitRef(str(trait["path"]), self.span(trait["span"]), def_id=trait.get("def_id"))
        return ImplItem(
            self_ty=str(data.get("self_ty", "")),
            span=self.span(data["span"]),
            of_trait=of_trait,
            safety=self._safety(data),
            items=self.items(data.get("items")),
        )

    @staticmethod
    def _safety(data: Dict[str, Any]) -> Safety:
        return Safety.UNSAFE if data.get("unsafe") else Safety.SAFE


def unit_from_mapping(data: Dict[str, Any], default_file: str = "<unknown>") -> CompilationUnit:
    """Build a ``CompilationUnit`` from a parsed dump document."""

    if not isinstance(data, dict):
        raise ValueError("Tree dump is not a mapping")
    loader = _UnitLoader(str(data.get("file", default_file)))
    lang_items = dict(DEFAULT_LANG_ITEMS)
    for key, def_id in (data.get("lang_items") or {}).items():
        lang_items[LangItem(key)] = str(def_id)
    return CompilationUnit(
        name=str(data.get("unit", Path(default_file).stem)),
        items=loader.items(data.get("items")),
        definitions={str(key): str(value) for key, value in (data.get("definitions") or {}).items()},
        lang_items=lang_items,
    )


def load_unit(path: Path) -> CompilationUnit | None:
    """Load a tree dump file into a ``CompilationUnit``."""

    data = read_yaml_file(path)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"Tree dump at {path} is not a mapping")
    return unit_from_mapping(data, default_file=str(path))
