# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Walk stylesheet selectors and extract class and id names.

Lexing is done by the ``cssutils`` tokenizer; this module only tracks which
tokens belong to a rule's selector prelude.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from cssutils.tokenize2 import Tokenizer

logger = logging.getLogger(__name__)

CLASS_MARKER = "."
ID_MARKER = "#"

_SIMPLE_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_DIGIT_START = re.compile(r"-?[0-9]")
_TRIVIA: frozenset[str] = frozenset({"BOM", "S", "COMMENT", "CDO", "CDC"})
_AT_RULE_TOKENS: frozenset[str] = frozenset({"ATKEYWORD", "CHARSET_SYM"})


@dataclass(frozen=True)
class SelectorToken:
    """Represent one class or id selector occurrence.

    Args:
        marker: Selector marker character (``.`` or ``#``).
        name: Decoded identifier (CSS escapes resolved).
        start: Offset of the marker in the stylesheet text.
        end: Offset just past the last identifier character.
    """

    marker: str
    name: str
    start: int
    end: int


@dataclass(frozen=True)
class _Lexeme:
    kind: str
    value: str
    start: int
    end: int


def iter_selector_tokens(text: str) -> Iterator[SelectorToken]:
    """Yield class and id selector tokens from rule preludes.

    Comments, strings, declaration values and at-rule preludes are never
    scanned; nested blocks (``@media``, ``@supports``, CSS nesting) are.

    Args:
        text: Stylesheet source.

    Yields:
        Selector tokens in source order.
    """
    lexemes = _lex(text)
    prelude_start = 0
    for index, lexeme in enumerate(lexemes):
        if lexeme.kind != "CHAR":
            continue
        if lexeme.value == "{":
            prelude = lexemes[prelude_start:index]
            if not _is_at_rule(prelude):
                yield from _scan_prelude(prelude)
            prelude_start = index + 1
        elif lexeme.value in ";}":
            prelude_start = index + 1


def extract_class_names(text: str) -> list[str]:
    """Extract distinct class names in first-occurrence order.

    Args:
        text: Stylesheet source.

    Returns:
        Ordered distinct class names.
    """
    return _distinct_names(text, CLASS_MARKER)


def extract_id_names(text: str) -> list[str]:
    """Extract distinct id names in first-occurrence order."""
    return _distinct_names(text, ID_MARKER)


def merge_ordered(name_lists: Iterable[Iterable[str]]) -> list[str]:
    """Merge per-file name lists keeping file order then first occurrence.

    Args:
        name_lists: Name lists in file-processing order.

    Returns:
        Ordered distinct names.
    """
    merged: dict[str, None] = {}
    for names in name_lists:
        for name in names:
            merged.setdefault(name, None)
    return list(merged)


def is_identifier(name: str) -> bool:
    """Check whether name is usable as an unescaped CSS identifier.

    Args:
        name: Candidate identifier.

    Returns:
        True when ``.name`` would tokenize back to ``name``.
    """
    if not name or "\\" in name:
        return False
    lexemes = _lex(name)
    return len(lexemes) == 1 and lexemes[0].kind == "IDENT" and lexemes[0].value == name


def leading_selector_token(selector: str) -> SelectorToken | None:
    """Return the class or id token a selector string opens with.

    Args:
        selector: Selector text such as ``".btn > span"``.

    Returns:
        The opening token, or None when the selector starts otherwise.
    """
    lexemes = _lex(selector)
    if not lexemes:
        return None
    return _selector_token_at(lexemes, 0)


def _distinct_names(text: str, marker: str) -> list[str]:
    names: dict[str, None] = {}
    for token in iter_selector_tokens(text):
        if token.marker == marker:
            names.setdefault(token.name, None)
    return list(names)


def _lex(text: str) -> list[_Lexeme]:
    """Tokenize text into lexemes carrying absolute offsets.

    The tokenizer reports 1-based line and column positions, counting only
    ``\\n`` as a line break; offsets are rebuilt from the same line starts so
    spans stay byte-faithful for ``\\r\\n`` sources.

    Args:
        text: Stylesheet or selector source.

    Returns:
        Lexemes in source order; each ends where the next one starts.
    """
    line_starts = [0]
    line_starts.extend(match.end() for match in re.finditer("\n", text))
    raw: list[tuple[str, str, int]] = []
    # a leading byte-order mark is reported without advancing the column
    bom_width = 0
    for kind, value, line, col in Tokenizer().tokenize(text, fullsheet=True):
        if kind == "EOF":
            break
        if kind == "BOM":
            bom_width = len(value)
            raw.append((kind, value, 0))
            continue
        shift = bom_width if line == 1 else 0
        raw.append((kind, value, line_starts[line - 1] + col - 1 + shift))
    lexemes: list[_Lexeme] = []
    for index, (kind, value, start) in enumerate(raw):
        end = raw[index + 1][2] if index + 1 < len(raw) else len(text)
        lexemes.append(_Lexeme(kind=kind, value=value, start=start, end=end))
    return lexemes


def _is_at_rule(prelude: list[_Lexeme]) -> bool:
    for lexeme in prelude:
        if lexeme.kind in _TRIVIA:
            continue
        return lexeme.kind in _AT_RULE_TOKENS or lexeme.kind.endswith("_SYM")
    return False


def _scan_prelude(prelude: list[_Lexeme]) -> Iterator[SelectorToken]:
    """Yield selector tokens inside one selector prelude.

    Attribute selector contents (``[title=".x"]``) are skipped.

    Args:
        prelude: Lexemes between the previous boundary and the opening brace.
    """
    depth = 0
    for index, lexeme in enumerate(prelude):
        if lexeme.kind == "CHAR" and lexeme.value == "[":
            depth += 1
        elif lexeme.kind == "CHAR" and lexeme.value == "]":
            depth = max(depth - 1, 0)
        elif depth == 0:
            token = _selector_token_at(prelude, index)
            if token is not None:
                yield token


def _selector_token_at(lexemes: list[_Lexeme], index: int) -> SelectorToken | None:
    lexeme = lexemes[index]
    if lexeme.kind == "CHAR" and lexeme.value == CLASS_MARKER:
        if index + 1 >= len(lexemes):
            return None
        ident = lexemes[index + 1]
        if ident.kind != "IDENT" or ident.start != lexeme.end:
            return None
        return SelectorToken(
            marker=CLASS_MARKER,
            name=_unescape(ident.value),
            start=lexeme.start,
            end=ident.end,
        )
    if lexeme.kind == "HASH":
        name = _unescape(lexeme.value[1:])
        if not name or name == "-" or _DIGIT_START.match(name):
            return None
        return SelectorToken(marker=ID_MARKER, name=name, start=lexeme.start, end=lexeme.end)
    return None


def _unescape(value: str) -> str:
    """Resolve the simple escapes the tokenizer leaves in identifier values."""
    return _SIMPLE_ESCAPE.sub(r"\1", value)
