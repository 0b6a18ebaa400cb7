# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Best-effort rewriting of literal class usages in script text.

Only these idioms are recognized, each with a plain single- or double-quoted
string literal (no escapes, no template literals):

* ``classList.add|remove|toggle|contains("name"`` where the first argument
  equals a mapped class;
* ``getElementsByClassName("a b")`` where a space-separated token equals a
  mapped class;
* ``querySelector|querySelectorAll|closest|matches(".name ...")`` where the
  literal begins with ``.`` plus a mapped class; only that leading token is
  substituted;
* ``className = "a b"`` where a whitespace-delimited token equals a mapped
  class.

With element ids enabled, ``getElementById("name")`` and selector literals
beginning with ``#`` plus a mapped id are rewritten too. Concatenation,
interpolation and computed lookups are never touched.
"""

import logging
import re
from collections.abc import Mapping
from typing import Callable

from classmask.extractor import CLASS_MARKER, leading_selector_token
from classmask.rewriters.result import RewriteResult

logger = logging.getLogger(__name__)

_LITERAL = r"""(?P<quote>['"])(?P<literal>[^'"\\\n]*)(?P=quote)"""

_CLASS_LIST_CALL = re.compile(
    r"\bclassList\s*\.\s*(?:add|remove|toggle|contains)\s*\(\s*" + _LITERAL + r"\s*(?=[,)])"
)
_CLASS_LOOKUP_CALL = re.compile(
    r"\bgetElementsByClassName\s*\(\s*" + _LITERAL + r"\s*(?=\))"
)
_SELECTOR_CALL = re.compile(
    r"\b(?:querySelectorAll|querySelector|closest|matches)\s*\(\s*" + _LITERAL
)
_CLASS_NAME_ASSIGNMENT = re.compile(r"\bclassName\s*=(?![=>])\s*" + _LITERAL)
_ID_LOOKUP_CALL = re.compile(r"\bgetElementById\s*\(\s*" + _LITERAL + r"\s*(?=\))")
_WORD = re.compile(r"\S+")

_Edit = tuple[int, int, str]


def rewrite_script(
    text: str,
    classes: Mapping[str, str],
    ids: Mapping[str, str] | None = None,
) -> RewriteResult:
    """Substitute mapped names inside recognized literal idioms.

    Args:
        text: Script source.
        classes: Class name mapping.
        ids: Optional element id mapping.

    Returns:
        Rewritten script.
    """
    edits: list[_Edit] = []
    if classes:
        edits.extend(_literal_edits(text, _CLASS_LIST_CALL, lambda lit: classes.get(lit)))
        edits.extend(
            _literal_edits(text, _CLASS_LOOKUP_CALL, lambda lit: _map_words(lit, classes))
        )
        edits.extend(
            _literal_edits(
                text, _CLASS_NAME_ASSIGNMENT, lambda lit: _map_words(lit, classes)
            )
        )
    if classes or ids:
        edits.extend(
            _literal_edits(
                text,
                _SELECTOR_CALL,
                lambda lit: _map_leading_selector(lit, classes, ids or {}),
            )
        )
    if ids:
        edits.extend(_literal_edits(text, _ID_LOOKUP_CALL, lambda lit: ids.get(lit)))
    if not edits:
        return RewriteResult(text=text, replacements=0)

    pieces: list[str] = []
    cursor = 0
    replacements = 0
    for start, end, replacement in sorted(edits):
        if start < cursor:
            continue
        pieces.append(text[cursor:start])
        pieces.append(replacement)
        cursor = end
        replacements += 1
    pieces.append(text[cursor:])
    return RewriteResult(text="".join(pieces), replacements=replacements)


def _literal_edits(
    text: str,
    pattern: re.Pattern[str],
    transform: Callable[[str], str | None],
) -> list[_Edit]:
    edits: list[_Edit] = []
    for match in pattern.finditer(text):
        literal = match.group("literal")
        replacement = transform(literal)
        if replacement is None or replacement == literal:
            continue
        edits.append((match.start("literal"), match.end("literal"), replacement))
    return edits


def _map_words(literal: str, table: Mapping[str, str]) -> str | None:
    """Replace whitespace-delimited words equal to a key, keeping spacing."""
    replaced = _WORD.sub(lambda word: table.get(word.group(0), word.group(0)), literal)
    return replaced if replaced != literal else None


def _map_leading_selector(
    literal: str,
    classes: Mapping[str, str],
    ids: Mapping[str, str],
) -> str | None:
    """Replace the class or id token that opens a selector literal."""
    selector = leading_selector_token(literal)
    if selector is None or selector.start != 0:
        return None
    table = classes if selector.marker == CLASS_MARKER else ids
    token = table.get(selector.name)
    if token is None:
        return None
    return f"{selector.marker}{token}{literal[selector.end :]}"
