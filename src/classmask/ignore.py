# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Decide which class names are exempt from renaming."""

import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass(frozen=True)
class IgnoreRule:
    """Represent one exact or trailing-wildcard ignore pattern.

    Args:
        pattern: Pattern text as configured.
        prefix: Literal part of the pattern (pattern without trailing wildcard).
        wildcard: True when the pattern ends with the wildcard marker.
    """

    pattern: str
    prefix: str
    wildcard: bool

    @classmethod
    def parse(cls, pattern: str) -> "IgnoreRule":
        """Parse a configured pattern.

        Args:
            pattern: Exact class name or prefix followed by ``*``.

        Returns:
            Parsed rule.

        Raises:
            ValueError: If pattern is empty.
        """
        text = pattern.strip()
        if not text:
            raise ValueError("Ignore pattern must not be empty")
        if text.endswith(WILDCARD):
            return cls(pattern=text, prefix=text[: -len(WILDCARD)], wildcard=True)
        return cls(pattern=text, prefix=text, wildcard=False)

    def matches(self, name: str) -> bool:
        """Check whether name is exempted by this rule.

        Args:
            name: Class name.

        Returns:
            True when the rule matches.
        """
        if self.wildcard:
            return name.startswith(self.prefix)
        return name == self.prefix


def is_ignored(name: str, rules: Iterable[IgnoreRule]) -> bool:
    """Check whether any rule exempts name."""
    return any(rule.matches(name) for rule in rules)


def parse_rules(patterns: Iterable[str]) -> tuple[IgnoreRule, ...]:
    """Parse configured patterns, dropping duplicates while keeping order."""
    seen: set[str] = set()
    rules: list[IgnoreRule] = []
    for pattern in patterns:
        rule = IgnoreRule.parse(pattern)
        if rule.pattern in seen:
            continue
        seen.add(rule.pattern)
        rules.append(rule)
    return tuple(rules)


class IgnoreMatcher:
    """Match names against a fixed rule set and remember exempted names."""

    def __init__(self, rules: Iterable[IgnoreRule]) -> None:
        """Initialize matcher.

        Args:
            rules: Ignore rules applied to every name.
        """
        self._rules = tuple(rules)
        self._exact = frozenset(rule.prefix for rule in self._rules if not rule.wildcard)
        self._prefixes = tuple(rule.prefix for rule in self._rules if rule.wildcard)
        self._ignored: dict[str, None] = {}

    @property
    def rules(self) -> tuple[IgnoreRule, ...]:
        return self._rules

    @property
    def ignored(self) -> list[str]:
        """Names exempted so far, in first-seen order."""
        return list(self._ignored)

    def is_ignored(self, name: str) -> bool:
        """Check name and record it when exempted.

        Args:
            name: Candidate class name.

        Returns:
            True when the name must stay unchanged.
        """
        if name in self._exact or name.startswith(self._prefixes):
            if name not in self._ignored:
                self._ignored[name] = None
                logger.debug("Class exempted by ignore rule (name=%s)", name)
            return True
        return False
