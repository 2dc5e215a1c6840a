"""Exception taxonomy for the lint engine."""

from __future__ import annotations


class SeclintError(Exception):
    """Base class for all engine errors."""


class MatchError(SeclintError):
    """A rule cannot classify a node; the node yields no diagnostic."""


class SpanResolutionError(SeclintError):
    """Unwinding a span through nested expansions did not terminate."""


class ConfigError(SeclintError):
    """Configuration names an unknown rule or carries a malformed entry."""

    def __init__(self, message: str, rule_id: str | None = None) -> None:
        super().__init__(message)
        self.rule_id = rule_id
