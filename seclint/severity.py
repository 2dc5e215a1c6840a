"""Severity definitions for lint diagnostics."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the lint levels the host compiler understands."""

    DENY = "deny"
    WARN = "warn"

    @property
    def exit_priority(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.DENY: 2,
            Severity.WARN: 0,
        }
        return ordering[self]

    @classmethod
    def parse(cls, value: object) -> "Severity":
        """Map a configuration value such as ``"Deny"`` onto a level."""

        if isinstance(value, Severity):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"Unknown severity level: {value!r}")
