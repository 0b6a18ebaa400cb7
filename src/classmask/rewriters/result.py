# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Shared rewrite result type."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RewriteResult:
    """Store rewritten text and the number of substitutions.

    Args:
        text: Rewritten artifact text.
        replacements: Count of tokens substituted.
    """

    text: str
    replacements: int

    @property
    def changed(self) -> bool:
        return self.replacements > 0
