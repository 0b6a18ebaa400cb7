# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rewrite class and id selectors in stylesheet text."""

import logging
from collections.abc import Mapping

from classmask.extractor import CLASS_MARKER, iter_selector_tokens
from classmask.rewriters.result import RewriteResult

logger = logging.getLogger(__name__)


def rewrite_stylesheet(
    text: str,
    classes: Mapping[str, str],
    ids: Mapping[str, str] | None = None,
) -> RewriteResult:
    """Substitute mapped selector tokens.

    Only whole selector identifiers are replaced, so a short name is never
    rewritten inside a longer one (``btn`` inside ``btn-primary``).

    Args:
        text: Stylesheet source.
        classes: Class name mapping.
        ids: Optional element id mapping.

    Returns:
        Rewritten stylesheet.
    """
    pieces: list[str] = []
    cursor = 0
    replacements = 0
    for token in iter_selector_tokens(text):
        table = classes if token.marker == CLASS_MARKER else ids
        if not table:
            continue
        replacement = table.get(token.name)
        if replacement is None:
            continue
        pieces.append(text[cursor : token.start])
        pieces.append(token.marker + replacement)
        cursor = token.end
        replacements += 1
    if replacements == 0:
        return RewriteResult(text=text, replacements=0)
    pieces.append(text[cursor:])
    return RewriteResult(text="".join(pieces), replacements=replacements)
