"""Diagnostic records and the per-unit sink that collects them."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .severity import Severity
from .span import Span

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.DENY,
    Severity.WARN,
)


@dataclass(frozen=True)
class Diagnostic:
    """A single rule match anchored to a user-visible span."""

    rule: str
    severity: Severity
    span: Span
    message: str
    category: Optional[str] = None

    def sort_key(self) -> Tuple[str, int, int, str]:
        return (self.span.file, self.span.line, self.span.column, self.rule)

    def to_dict(self) -> Dict[str, object]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "category": self.category,
            "span": self.span.to_dict(),
        }


@dataclass
class Summary:
    """Aggregate diagnostic counts by severity."""

    deny: int = 0
    warn: int = 0

    def increment(self, severity: Severity) -> None:
        attr = severity.value
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, getattr(self, severity.value)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(getattr(self, severity.value) for severity in SEVERITY_ORDER)


@dataclass
class DiagnosticSink:
    """Accumulate diagnostics in emission order.

    A diagnostic equal in every field to one already recorded is dropped, so
    a macro that expands into several identical backend calls reports once.
    """

    summary: Summary = field(default_factory=Summary)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    _seen: Set[Diagnostic] = field(default_factory=set, repr=False, compare=False)

    @property
    def passed(self) -> bool:
        return self.summary.deny == 0

    def add(self, diagnostic: Diagnostic) -> bool:
        """Record ``diagnostic``; return ``False`` if it was a duplicate."""

        if diagnostic in self._seen:
            return False
        self._seen.add(diagnostic)
        self.summary.increment(diagnostic.severity)
        self.diagnostics.append(diagnostic)
        return True

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def sorted_diagnostics(self) -> List[Diagnostic]:
        """Stable sort by span start, then rule id; ties keep emission order."""

        return sorted(self.diagnostics, key=Diagnostic.sort_key)

    def to_dict(self) -> Dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.sorted_diagnostics()],
            "passed": self.passed,
        }

    def exit_code(self) -> int:
        if not self.diagnostics:
            return 0
        return max(diagnostic.severity.exit_priority for diagnostic in self.diagnostics)

    def top_diagnostics(self, limit: int = 5) -> List[Diagnostic]:
        """Return diagnostics ordered by severity ranking, then position."""

        severity_rank = {severity: idx for idx, severity in enumerate(SEVERITY_ORDER)}
        ordered = sorted(
            self.diagnostics,
            key=lambda diagnostic: (severity_rank[diagnostic.severity], diagnostic.sort_key()),
        )
        return ordered[:limit]


def format_summary_table(sink: DiagnosticSink, max_diagnostics: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Lint Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in sink.summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    status = "PASS" if sink.passed else "FAIL"
    lines.append(f"Status    : {status}")
    lines.append(f"Diagnostics: {sink.summary.total}")

    diagnostics = sink.top_diagnostics(max_diagnostics)
    if diagnostics:
        lines.append("")
        lines.append("Top Diagnostics")
        lines.append("-" * 40)
        for diagnostic in diagnostics:
            category = f" [{diagnostic.category}]" if diagnostic.category else ""
            lines.append(
                f"[{diagnostic.severity.value}] {diagnostic.rule}{category} {diagnostic.message}"
            )
            lines.append(f"  Location: {diagnostic.span.location()}")
    return "\n".join(lines)
