"""Regex role mapper — named rules that add and optionally replace roles.

Rules come from flat ``<rule>.<attribute>`` configuration keys::

    legacy.regexp    = LEGACY_.*
    legacy.destRole  = legacy
    legacy.doReplace = true

- ``regexp``: pattern that must match the whole role name.
- ``destRole``: role added when the pattern matches.
- ``doReplace``: remove the matched role too (default ``true``).

Every active rule is evaluated against the original input roles in rule-name
order; additions and removals are applied once, after all matching.
All matching rules apply (there is no first-match short circuit).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cached_property

logger = logging.getLogger(__name__)


@dataclass
class TransformRule:
    """One named mapping rule. Inert until both pattern and destination exist."""

    name: str
    pattern: str | None = None
    destination_role: str | None = None
    replace: bool = True

    @property
    def active(self) -> bool:
        return self.pattern is not None and self.destination_role is not None

    @cached_property
    def compiled(self) -> re.Pattern[str] | None:
        if self.pattern is None:
            return None
        try:
            return re.compile(self.pattern)
        except re.error as exc:
            logger.warning("Role rule %s has an invalid regexp %r: %s", self.name, self.pattern, exc)
            return None

    def describe(self) -> str:
        action = "replace" if self.replace else "add"
        return f'{self.name}: "{self.pattern}" ==> "{self.destination_role}" {action}'


def build_rule_set(config: Mapping[str, str]) -> dict[str, TransformRule]:
    """Build rules from flat ``<rule>.<attribute>`` keys.

    Keys that do not split into exactly two dot-separated parts are ignored.
    Attribute names are case-insensitive; unknown attributes leave the rule
    untouched.
    """
    rules: dict[str, TransformRule] = {}
    for key, value in config.items():
        parts = key.split(".")
        if len(parts) != 2:
            continue
        rule_name, attribute = parts
        rule = rules.setdefault(rule_name, TransformRule(name=rule_name))
        match attribute.lower():
            case "regexp":
                rule.pattern = value
            case "destrole":
                rule.destination_role = value
            case "doreplace":
                rule.replace = value.strip().lower() == "true"
    return rules


def _active_in_order(rules: Mapping[str, TransformRule]) -> list[TransformRule]:
    return [rules[name] for name in sorted(rules) if rules[name].active]


@dataclass
class RoleMapper:
    """Applies a rule set to role sets.

    The rule set is replaced as a whole on :meth:`initialize`; readers of
    :meth:`map_roles` always see either the old or the new dict.
    """

    rules: dict[str, TransformRule] = field(default_factory=dict)

    def initialize(self, config: Mapping[str, str]) -> None:
        rules = build_rule_set(config)
        if logger.isEnabledFor(logging.DEBUG):
            summary = "\n".join(rules[name].describe() for name in sorted(rules))
            logger.debug("Role mapper initialized:\n%s", summary)
        self.rules = rules

    def active_rules(self) -> list[TransformRule]:
        """Active rules in deterministic rule-name order."""
        return _active_in_order(self.rules)

    def map_roles(self, roles: Iterable[str]) -> frozenset[str]:
        """Map *roles* through every active rule.

        Empty input or an empty rule set returns the input unchanged.
        """
        source = frozenset(roles)
        rules = self.rules
        if not source or not rules:
            logger.debug("No source roles or rules, nothing to map")
            return source

        to_add: set[str] = set()
        to_remove: set[str] = set()
        for rule in _active_in_order(rules):
            pattern = rule.compiled
            if pattern is None:
                continue
            for role in source:
                if pattern.fullmatch(role):
                    to_add.add(rule.destination_role)  # type: ignore[arg-type]
                    if rule.replace:
                        to_remove.add(role)

        result = (source - to_remove) | to_add
        logger.debug("Role mapping result: [%s] ==> [%s]", ",".join(sorted(source)), ",".join(sorted(result)))
        return frozenset(result)
