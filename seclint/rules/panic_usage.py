"""Detect constructs that may panic at runtime.

Two independent families are matched:

* accessor calls such as ``value.unwrap()`` and ``value.expect("...")``,
  recognised purely by method name;
* direct calls whose callee resolves to one of the standard library's panic
  backends. ``panic!``, ``assert!``, ``assert_eq!``, ``todo!`` and friends
  expand into such calls, so these diagnostics are reported at the macro call
  site rather than inside the expansion.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from seclint.diagnostics import Diagnostic
from seclint.hir import Call, MethodCall, Node
from seclint.severity import Severity

from . import LintContext, Rule, build_diagnostic


class PanicKind(str, Enum):
    """Accessors on ``Option``/``Result`` that panic on the wrong variant."""

    UNWRAP = "unwrap"
    EXPECT = "expect"
    UNWRAP_ERR = "unwrap_err"
    EXPECT_ERR = "expect_err"

    @property
    def label(self) -> str:
        return _camel_case(self.value)

    @classmethod
    def from_method(cls, name: str) -> Optional["PanicKind"]:
        for kind in cls:
            if kind.value == name:
                return kind
        return None


class PanicBackend(str, Enum):
    """Runtime entry points that unconditionally begin unwinding."""

    PANICKING_MODULE = "panicking_module"
    PANIC_FMT = "panic_fmt"
    PANIC_DISPLAY = "panic_display"
    ASSERT_FAILED = "assert_failed"
    BEGIN_PANIC = "begin_panic"

    @property
    def label(self) -> str:
        return _camel_case(self.value)

    @classmethod
    def from_def_path(cls, path: str) -> Optional["PanicBackend"]:
        """Return the first backend whose signature occurs in ``path``."""

        for signature, backend in BACKEND_SIGNATURES:
            if signature in path:
                return backend
        return None


# Order matters: the first signature contained in the path wins.
BACKEND_SIGNATURES: Sequence[Tuple[str, PanicBackend]] = (
    ("panicking::", PanicBackend.PANICKING_MODULE),
    ("panic_fmt", PanicBackend.PANIC_FMT),
    ("panic_display", PanicBackend.PANIC_DISPLAY),
    ("assert_failed", PanicBackend.ASSERT_FAILED),
    ("begin_panic", PanicBackend.BEGIN_PANIC),
)


def _camel_case(value: str) -> str:
    return "".join(part.capitalize() for part in value.split("_"))


class PanicProneCallRule:
    """Flag accessor calls and panic backend calls."""

    id = "security_panic_usage"
    severity = Severity.DENY
    description = "Detects constructs that may panic at runtime."

    def matches(self, node: Node, context: LintContext) -> List[Diagnostic]:
        if isinstance(node, MethodCall):
            kind = PanicKind.from_method(node.method)
            if kind is None:
                return []
            return [self._report(context, node, kind.label, kind.value)]

        if isinstance(node, Call):
            path = context.def_path_str(node.func)
            if path is None:
                return []
            backend = PanicBackend.from_def_path(path)
            if backend is None:
                return []
            return [self._report(context, node, backend.label, backend.value)]

        return []

    def _report(self, context: LintContext, node: Node, label: str, category: str) -> Diagnostic:
        # build_diagnostic resolves the span to the outermost macro call site.
        return build_diagnostic(
            self,
            context,
            node.span,
            f"Call to panic backend `{label}` detected.",
            category,
        )


def get_rule() -> Rule:
    return PanicProneCallRule()
