import pytest

from seclint.engine import run
from seclint.hir import (
    Block,
    BlockExpr,
    Call,
    CompilationUnit,
    ExprStmt,
    FnItem,
    Literal,
    MethodCall,
    PathExpr,
)
from seclint.registry import RuleRegistry
from seclint.rules.panic_usage import PanicBackend, PanicKind, PanicProneCallRule
from seclint.span import MacroExpansion, Span

MACROS_RS = "library/core/src/macros/mod.rs"

DEFINITIONS = {
    "def:panic": "core::panicking::panic",
    "def:panic_fmt": "core::panic_fmt",
    "def:assert_failed": "core::assert_failed",
    "def:begin_panic": "std::rt::begin_panic",
    "def:panic_display": "core::panic_display",
    "def:println": "std::io::_print",
}


def sp(line, column=5, end_column=20):
    return Span("src/main.rs", line, column, line, end_column)


def expansion_of(call_site, macro, line=40):
    return Span(MACROS_RS, line, 9, line, 60, origin=MacroExpansion(call_site, macro))


def main_with(*exprs):
    stmts = tuple(ExprStmt(expr, expr.span) for expr in exprs)
    body_span = Span("src/main.rs", 1, 11, 30, 2)
    return FnItem("main", Span("src/main.rs", 1, 1, 30, 2), body=BlockExpr(Block(stmts, body_span), body_span))


def lint(*exprs, definitions=None):
    registry = RuleRegistry()
    registry.add(PanicProneCallRule())
    unit = CompilationUnit(
        "main",
        items=(main_with(*exprs),),
        definitions=DEFINITIONS if definitions is None else definitions,
    )
    return run(unit, registry)


def backend_call(def_id, span):
    return Call(PathExpr(("panic",), span, def_id=def_id), (Literal("boom", span),), span)


def test_accessor_calls_each_report_their_kind():
    receiver = PathExpr(("x",), sp(3, 5, 6))
    unwrap = MethodCall(receiver, "unwrap", (), sp(3, 5, 15))
    expect = MethodCall(PathExpr(("x",), sp(4, 5, 6)), "expect", (Literal("", sp(4, 14, 16)),), sp(4, 5, 17))

    diagnostics = lint(unwrap, expect)

    assert [(d.category, d.span) for d in diagnostics] == [
        ("unwrap", unwrap.span),
        ("expect", expect.span),
    ]
    assert diagnostics[0].message == "Call to panic backend `Unwrap` detected."
    assert diagnostics[1].message == "Call to panic backend `Expect` detected."


def test_other_method_calls_do_not_trigger():
    safe = MethodCall(PathExpr(("x",), sp(3, 5, 6)), "unwrap_or", (Literal(0, sp(3, 16, 17)),), sp(3, 5, 18))

    assert lint(safe) == []


def test_assert_macro_reports_call_site_not_expansion():
    site = sp(15, 5, 19)
    call = backend_call("def:panic", expansion_of(site, "assert"))

    diagnostics = lint(call)

    assert len(diagnostics) == 1
    assert diagnostics[0].span == site
    assert diagnostics[0].span.file == "src/main.rs"
    assert diagnostics[0].category == "panicking_module"
    assert diagnostics[0].message == "Call to panic backend `PanickingModule` detected."


def test_nested_macro_expansion_reports_outermost_site():
    site = sp(16, 5, 22)
    inner = expansion_of(expansion_of(site, "assert_eq", line=50), "panic", line=70)
    call = backend_call("def:assert_failed", inner)

    diagnostics = lint(call)

    assert [(d.category, d.span) for d in diagnostics] == [("assert_failed", site)]


@pytest.mark.parametrize(
    "def_id, category",
    [
        ("def:panic_fmt", "panic_fmt"),
        ("def:panic_display", "panic_display"),
        ("def:assert_failed", "assert_failed"),
        ("def:begin_panic", "begin_panic"),
    ],
)
def test_backend_kinds(def_id, category):
    diagnostics = lint(backend_call(def_id, sp(5)))

    assert [d.category for d in diagnostics] == [category]


def test_unresolved_or_unrelated_callee_is_no_match():
    unresolved = backend_call("def:missing", sp(5))
    no_def = backend_call(None, sp(6))
    printing = backend_call("def:println", sp(7))

    assert lint(unresolved, no_def, printing) == []


def test_callee_that_is_not_a_path_is_no_match():
    callee = MethodCall(PathExpr(("handlers",), sp(8, 5, 13)), "first", (), sp(8, 5, 21))
    call = Call(callee, (), sp(8, 5, 23))

    assert lint(call) == []


def test_first_matching_signature_wins():
    assert PanicBackend.from_def_path("core::panicking::panic_fmt") == PanicBackend.PANICKING_MODULE
    assert PanicBackend.from_def_path("std::rt::panic_display") == PanicBackend.PANIC_DISPLAY
    assert PanicBackend.from_def_path("core::result::Result::map") is None


def test_substring_match_is_preserved_for_lookalike_paths():
    assert PanicBackend.from_def_path("my_crate::custom_begin_panic_handler") == PanicBackend.BEGIN_PANIC


def test_accessor_kinds():
    assert PanicKind.from_method("unwrap_err") == PanicKind.UNWRAP_ERR
    assert PanicKind.from_method("expect_err").label == "ExpectErr"
    assert PanicKind.from_method("unwrap_or_default") is None


def test_identical_backend_calls_from_one_expansion_report_once():
    site = sp(17, 5, 22)
    inner = expansion_of(site, "assert_eq")
    diagnostics = lint(backend_call("def:assert_failed", inner), backend_call("def:assert_failed", inner))

    assert len(diagnostics) == 1


def test_cyclic_expansion_chain_reports_plain_innermost_span():
    origin = MacroExpansion(call_site=sp(18), macro="ping")
    inner = Span(MACROS_RS, 50, 9, 50, 60, origin=origin)
    outer = Span(MACROS_RS, 60, 9, 60, 60, origin=MacroExpansion(call_site=inner, macro="pong"))
    object.__setattr__(origin, "call_site", outer)

    diagnostics = lint(backend_call("def:panic", inner), backend_call("def:panic", inner))

    assert [(d.category, d.span) for d in diagnostics] == [
        ("panicking_module", Span(MACROS_RS, 50, 9, 50, 60)),
    ]


def test_deep_expansion_chain_reports_user_call_site():
    site = sp(19, 5, 30)
    span = site
    for level in range(500):
        span = expansion_of(span, "nested", line=level + 100)

    diagnostics = lint(backend_call("def:panic_fmt", span))

    assert [d.span for d in diagnostics] == [site]
