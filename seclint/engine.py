"""Per-compilation-unit entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .diagnostics import Diagnostic, DiagnosticSink
from .hir import CompilationUnit
from .registry import RuleRegistry
from .rules import LintContext
from .span import SpanClassifier
from .walker import SyntaxTreeWalker

logger = logging.getLogger(__name__)


@dataclass
class LintSession:
    """Enabled rules plus the diagnostics gathered for one unit."""

    unit: CompilationUnit
    registry: RuleRegistry
    sink: DiagnosticSink = field(default_factory=DiagnosticSink)
    classifier: SpanClassifier = field(default_factory=SpanClassifier)

    def run(self) -> None:
        context = LintContext(unit=self.unit, classifier=self.classifier)
        SyntaxTreeWalker().traverse(self.unit, self.registry, context=context, sink=self.sink)
        logger.debug(
            "Linted unit %s with %d rules: %d diagnostics",
            self.unit.name,
            len(self.registry),
            self.sink.summary.total,
        )

    def flush(self) -> List[Diagnostic]:
        return self.sink.sorted_diagnostics()


def run(unit: CompilationUnit, registry: RuleRegistry) -> List[Diagnostic]:
    """Lint ``unit`` with ``registry`` and return the sorted diagnostics."""

    session = LintSession(unit=unit, registry=registry)
    session.run()
    return session.flush()
