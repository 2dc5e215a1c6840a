"""Rule registry: the ordered set of rules enabled for a lint session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

from .config import LintConfig
from .errors import ConfigError
from .rules import Rule
from .rules import indexing_usage, missing_type, panic_usage, unsafe_usage
from .severity import Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredRule:
    rule: Rule
    severity: Severity
    disabled_categories: FrozenSet[str] = frozenset()

    @property
    def id(self) -> str:
        return self.rule.id


class RuleRegistry:
    """Hold rules in registration order, unique by id."""

    def __init__(self) -> None:
        self._entries: Dict[str, RegisteredRule] = {}
        self.errors: List[ConfigError] = []

    def add(
        self,
        rule: Rule,
        severity: Optional[Severity] = None,
        disabled_categories: Iterable[str] = (),
    ) -> RegisteredRule:
        if rule.id in self._entries:
            raise ConfigError(f"Rule {rule.id!r} is already registered", rule_id=rule.id)
        entry = RegisteredRule(
            rule=rule,
            severity=severity or rule.severity,
            disabled_categories=frozenset(disabled_categories),
        )
        self._entries[rule.id] = entry
        return entry

    def get(self, rule_id: str) -> Optional[RegisteredRule]:
        return self._entries.get(rule_id)

    def enabled(self) -> List[RegisteredRule]:
        return list(self._entries.values())

    def rule_ids(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._entries

    def __iter__(self) -> Iterator[RegisteredRule]:
        return iter(self.enabled())

    def __len__(self) -> int:
        return len(self._entries)


def default_rules() -> List[Rule]:
    return [
        unsafe_usage.get_rule(),
        indexing_usage.get_rule(),
        panic_usage.get_rule(),
        missing_type.get_rule(),
    ]


def register(config: Union[LintConfig, Dict[str, Any], None] = None) -> RuleRegistry:
    """Build the enabled rule set from ``config``.

    Unknown rule ids are recorded on ``registry.errors`` and logged; every
    valid rule stays active.
    """

    if not isinstance(config, LintConfig):
        config = LintConfig.from_mapping(config)

    registry = RuleRegistry()
    registry.errors.extend(config.errors)

    rules = default_rules()
    known = {rule.id for rule in rules}
    for rule_id in config.rules:
        if rule_id not in known:
            message = f"Unknown rule id {rule_id!r} in configuration"
            logger.warning(message)
            registry.errors.append(ConfigError(message, rule_id=rule_id))

    for rule in rules:
        settings = config.rules.get(rule.id)
        if settings is not None and not settings.enabled:
            logger.debug("Rule %s disabled by configuration", rule.id)
            continue
        if settings is None:
            registry.add(rule)
        else:
            registry.add(rule, severity=settings.severity, disabled_categories=settings.disabled_categories)
    return registry
