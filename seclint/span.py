"""Source spans and classification of where a node's span came from."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set, Tuple, Union

from .errors import SpanResolutionError

logger = logging.getLogger(__name__)


class DesugaringKind(str, Enum):
    """Compiler lowerings that produce synthetic spans."""

    FOR_LOOP = "for_loop"
    QUESTION_MARK = "question_mark"
    ASYNC = "async"
    AWAIT = "await"
    WHILE_LOOP = "while_loop"
    OPAQUE_TY = "opaque_ty"
    FORMAT_LITERAL = "format_literal"
    RANGE_EXPR = "range_expr"


class SpanOriginKind(str, Enum):
    """Where a span came from, as answered by ``SpanClassifier.classify``."""

    DIRECT = "direct"
    MACRO_EXPANSION = "macro_expansion"
    DESUGARED = "desugared"


@dataclass(frozen=True)
class Direct:
    """The span was written by the user."""


@dataclass(frozen=True)
class MacroExpansion:
    """The span was produced by expanding the macro invoked at ``call_site``."""

    call_site: "Span"
    macro: str = ""


@dataclass(frozen=True)
class Desugared:
    """The span belongs to a compiler lowering of ``kind``."""

    kind: DesugaringKind
    call_site: Optional["Span"] = None


Origin = Union[Direct, MacroExpansion, Desugared]

DIRECT = Direct()


@dataclass(frozen=True)
class Span:
    """A region of a source file plus the origin of that region."""

    file: str
    line: int
    column: int
    end_line: int
    end_column: int
    origin: Origin = DIRECT

    @property
    def start(self) -> Tuple[int, int]:
        return (self.line, self.column)

    @property
    def end(self) -> Tuple[int, int]:
        return (self.end_line, self.end_column)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def call_site(self) -> "Span":
        """Return the immediate call site; a direct span is its own call site."""

        if isinstance(self.origin, MacroExpansion):
            return self.origin.call_site
        if isinstance(self.origin, Desugared) and self.origin.call_site is not None:
            return self.origin.call_site
        return self

    def location(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }


class SpanClassifier:
    """Answer origin questions about spans and resolve user-visible call sites.

    The three facts a rule may need are kept apart: whether a span comes from
    a macro expansion, which desugaring (if any) produced it, and where the
    outermost user-visible call site is.
    """

    def __init__(self, max_depth: Optional[int] = None) -> None:
        self._max_depth = max_depth

    def classify(self, span: Span) -> SpanOriginKind:
        if isinstance(span.origin, MacroExpansion):
            return SpanOriginKind.MACRO_EXPANSION
        if isinstance(span.origin, Desugared):
            return SpanOriginKind.DESUGARED
        return SpanOriginKind.DIRECT

    def from_expansion(self, span: Span) -> bool:
        return isinstance(span.origin, MacroExpansion)

    def desugaring_kind(self, span: Span) -> Optional[DesugaringKind]:
        if isinstance(span.origin, Desugared):
            return span.origin.kind
        return None

    def source_callsite(self, span: Span) -> Span:
        """Return the outermost call site of ``span``.

        If the chain of call sites cannot be unwound, the span itself is
        returned.
        """

        try:
            return self.unwind(span)
        except SpanResolutionError as exc:
            logger.debug("Falling back to innermost span %s: %s", span.location(), exc)
            return span

    def unwind(self, span: Span) -> Span:
        """Follow call sites until a span with no further call site is reached.

        Chains of any length unwind; only a span seen twice (or, when
        ``max_depth`` is set, more than ``max_depth`` hops) is an error.
        """

        current = span
        seen: Set[int] = set()
        while True:
            parent = current.call_site
            if parent is current:
                return current
            seen.add(id(current))
            if id(parent) in seen:
                raise SpanResolutionError(f"cyclic expansion chain at {current.location()}")
            if self._max_depth is not None and len(seen) > self._max_depth:
                raise SpanResolutionError(
                    f"expansion chain of {span.location()} deeper than {self._max_depth}"
                )
            current = parent
