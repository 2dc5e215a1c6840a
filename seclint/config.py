"""Lint configuration: which rules run and at what severity."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from .errors import ConfigError
from .severity import Severity
from .utils.fileio import read_yaml_file

logger = logging.getLogger(__name__)


@dataclass
class RuleSettings:
    enabled: bool = True
    severity: Optional[Severity] = None
    disabled_categories: FrozenSet[str] = frozenset()


@dataclass
class LintConfig:
    """Per-rule settings plus the non-fatal problems found while reading them."""

    rules: Dict[str, RuleSettings] = field(default_factory=dict)
    errors: List[ConfigError] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Any) -> "LintConfig":
        """Build a configuration from a parsed document.

        Accepted shape::

            rules:
              security_panic_usage: {severity: warn}
              security_indexing_usage: false
              missing_type: {disable_categories: [closure_param]}
        """

        config = cls()
        if data is None:
            return config
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        rules = data.get("rules") or {}
        if not isinstance(rules, dict):
            raise ConfigError("`rules` must map rule ids to settings")
        for rule_id, entry in rules.items():
            settings = config._parse_entry(str(rule_id), entry)
            if settings is not None:
                config.rules[str(rule_id)] = settings
        return config

    def _parse_entry(self, rule_id: str, entry: Any) -> Optional[RuleSettings]:
        if entry is None:
            return RuleSettings()
        if isinstance(entry, bool):
            return RuleSettings(enabled=entry)
        if not isinstance(entry, dict):
            self._error(f"Settings for rule {rule_id!r} must be a boolean or a mapping", rule_id)
            return None

        settings = RuleSettings()
        enabled = entry.get("enabled", True)
        if isinstance(enabled, bool):
            settings.enabled = enabled
        else:
            self._error(f"`enabled` for rule {rule_id!r} must be a boolean", rule_id)
        if entry.get("severity") is not None:
            try:
                settings.severity = Severity.parse(entry["severity"])
            except ValueError as exc:
                self._error(f"Rule {rule_id!r}: {exc}", rule_id)
        categories = entry.get("disable_categories")
        if categories is not None:
            if isinstance(categories, list) and all(isinstance(item, str) for item in categories):
                settings.disabled_categories = frozenset(categories)
            else:
                self._error(f"`disable_categories` for rule {rule_id!r} must be a list of names", rule_id)
        return settings

    def _error(self, message: str, rule_id: str) -> None:
        logger.warning(message)
        self.errors.append(ConfigError(message, rule_id=rule_id))


def load_config(path: Path) -> Optional[LintConfig]:
    """Load a YAML configuration file, or return ``None`` if it does not exist."""

    data = read_yaml_file(path)
    if data is None:
        return None
    return LintConfig.from_mapping(data)
