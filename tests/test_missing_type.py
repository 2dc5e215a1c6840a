from seclint.engine import run
from seclint.hir import (
    Binary,
    Block,
    BlockExpr,
    Closure,
    ClosureKind,
    CompilationUnit,
    FnItem,
    LetStmt,
    Literal,
    Param,
    PathExpr,
    Pattern,
    PatKind,
    TypeRef,
)
from seclint.registry import RuleRegistry
from seclint.rules.missing_type import MissingAnnotationRule
from seclint.severity import Severity
from seclint.span import Desugared, DesugaringKind, MacroExpansion, Span


def sp(line, column, end_column):
    return Span("src/main.rs", line, column, line, end_column)


def binding(name, line, column):
    kind = PatKind.WILD if name == "_" else PatKind.BINDING
    return Pattern(kind, sp(line, column, column + len(name)), name=name)


def let(name, line, ty=None, init=None, span=None):
    pat = binding(name, line, 9)
    type_ref = TypeRef(ty, sp(line, 12, 12 + len(ty))) if ty else None
    return LetStmt(pat, span or sp(line, 5, 30), ty=type_ref, init=init or Literal(5, sp(line, 20, 21)))


def param(name, line, column, ty=None):
    pat = binding(name, line, column)
    if ty is None:
        return Param(pat)
    start = column + len(name) + 2
    return Param(pat, ty_span=sp(line, start, start + len(ty)))


def closure(line, *params, kind=ClosureKind.CLOSURE, span=None):
    body = Binary("+", PathExpr(("a",), sp(line, 30, 31)), PathExpr(("b",), sp(line, 34, 35)), sp(line, 30, 35))
    return Closure(tuple(params), body, span or sp(line, 15, 35), kind=kind)


def lint(*stmts):
    registry = RuleRegistry()
    registry.add(MissingAnnotationRule())
    body_span = Span("src/main.rs", 1, 11, 40, 2)
    main = FnItem("main", Span("src/main.rs", 1, 1, 40, 2), body=BlockExpr(Block(tuple(stmts), body_span), body_span))
    return run(CompilationUnit("main", items=(main,)), registry)


def test_let_without_annotation_triggers():
    stmt = let("x", 3)

    diagnostics = lint(stmt)

    assert len(diagnostics) == 1
    assert diagnostics[0].span == stmt.pat.span
    assert diagnostics[0].category == "let_binding"
    assert diagnostics[0].message == "Missing explicit type annotation on let binding."
    assert diagnostics[0].severity == Severity.WARN


def test_let_with_annotation_or_wildcard_is_exempt():
    assert lint(let("y", 3, ty="i32"), let("_", 4)) == []


def test_let_from_macro_expansion_is_skipped():
    expanded = Span("src/lib.rs", 90, 1, 90, 40, origin=MacroExpansion(sp(3, 1, 20), "derive"))

    assert lint(let("tmp", 3, span=expanded)) == []


def test_let_from_desugaring_is_skipped():
    for kind in (DesugaringKind.FOR_LOOP, DesugaringKind.QUESTION_MARK, DesugaringKind.ASYNC):
        lowered = Span("src/main.rs", 5, 5, 7, 6, origin=Desugared(kind))
        assert lint(let("iter", 5, span=lowered)) == []


def test_closure_reports_each_unannotated_parameter():
    add = closure(6, param("a", 6, 16), param("b", 6, 19))

    diagnostics = lint(let("add", 6, ty="fn(i32, i32) -> i32", init=add))

    assert [(d.category, d.span) for d in diagnostics] == [
        ("closure_param", add.params[0].pat.span),
        ("closure_param", add.params[1].pat.span),
    ]
    assert diagnostics[0].message == "Closure parameter missing explicit type annotation."


def test_closure_with_one_annotated_parameter_reports_the_other():
    mul = closure(8, param("a", 8, 16), param("b", 8, 19, ty="i32"))

    diagnostics = lint(let("mul", 8, ty="fn(i32, i32) -> i32", init=mul))

    assert [d.span for d in diagnostics] == [mul.params[0].pat.span]


def test_fully_annotated_and_wildcard_closures_do_not_trigger():
    sub = closure(9, param("a", 9, 16, ty="i32"), param("b", 9, 24, ty="i32"))
    ignore = closure(10, param("_", 10, 16))

    assert lint(let("sub", 9, ty="fn(i32, i32) -> i32", init=sub), let("ignore", 10, ty="fn(i32) -> i32", init=ignore)) == []


def test_inferred_parameter_type_span_counts_as_missing():
    pat = binding("a", 11, 16)
    same_as_pattern = Param(pat, ty_span=pat.span)
    empty = Param(binding("b", 11, 19), ty_span=sp(11, 20, 20))
    fn = closure(11, same_as_pattern, empty)

    diagnostics = lint(let("f", 11, ty="fn(i32, i32) -> i32", init=fn))

    assert len(diagnostics) == 2


def test_coroutine_closure_is_skipped():
    coroutine = closure(12, param("a", 12, 16), kind=ClosureKind.COROUTINE)

    assert lint(let("fut", 12, ty="impl Future", init=coroutine)) == []


def test_closure_from_macro_expansion_is_skipped():
    expanded = Span("src/lib.rs", 80, 1, 80, 30, origin=MacroExpansion(sp(13, 5, 25), "async_trait"))
    generated = closure(13, param("a", 13, 16), span=expanded)

    assert lint(let("cb", 13, ty="Callback", init=generated)) == []


def test_closure_param_category_can_be_disabled():
    registry = RuleRegistry()
    registry.add(MissingAnnotationRule(), disabled_categories=["closure_param"])
    add = closure(13, param("a", 13, 16), param("b", 13, 19))
    body_span = Span("src/main.rs", 1, 11, 40, 2)
    main = FnItem(
        "main",
        Span("src/main.rs", 1, 1, 40, 2),
        body=BlockExpr(Block((let("add", 13, init=add),), body_span), body_span),
    )

    diagnostics = run(CompilationUnit("main", items=(main,)), registry)

    assert [d.category for d in diagnostics] == ["let_binding"]
