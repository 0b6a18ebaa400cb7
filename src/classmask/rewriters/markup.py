# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rewrite class attributes and inline blocks in markup text."""

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from classmask.rewriters.result import RewriteResult
from classmask.rewriters.script import rewrite_script
from classmask.rewriters.stylesheet import rewrite_stylesheet

logger = logging.getLogger(__name__)

_TAG_NAME = re.compile(r"<(/?)([A-Za-z][^\s/>]*)")
_ATTRIBUTE = re.compile(
    r"""([^\s"'<>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?"""
)
_RAW_TEXT_TAGS: frozenset[str] = frozenset({"script", "style"})
_PLAIN_TEXT_TAGS: frozenset[str] = frozenset({"textarea", "title"})
_ID_LIST_ATTRIBUTES: frozenset[str] = frozenset(
    {"aria-labelledby", "aria-describedby", "aria-controls", "aria-owns"}
)
_ID_SINGLE_ATTRIBUTES: frozenset[str] = frozenset({"id", "for"})
CLASS_ATTRIBUTES: frozenset[str] = frozenset({"class"})
ID_ATTRIBUTES: frozenset[str] = _ID_SINGLE_ATTRIBUTES | _ID_LIST_ATTRIBUTES


@dataclass(frozen=True)
class _Attribute:
    """Represent one attribute value span inside a start tag."""

    tag: str
    name: str
    value: str
    start: int
    end: int


@dataclass(frozen=True)
class _RawText:
    """Represent the body of a script or style element."""

    tag: str
    start: int
    end: int


def rewrite_markup(
    text: str,
    classes: Mapping[str, str],
    ids: Mapping[str, str] | None = None,
) -> RewriteResult:
    """Rewrite class attribute tokens and inline style/script bodies.

    Attribute values whose tokens are all unmapped are left byte-identical;
    otherwise the token list is rejoined with single spaces.

    Args:
        text: Markup source.
        classes: Class name mapping.
        ids: Optional element id mapping.

    Returns:
        Rewritten markup.
    """
    pieces: list[str] = []
    cursor = 0
    replacements = 0
    for item in _iter_markup(text):
        if isinstance(item, _Attribute):
            rewritten, count = _rewrite_attribute(item, classes, ids or {})
        else:
            body = text[item.start : item.end]
            if item.tag == "style":
                result = rewrite_stylesheet(body, classes, ids)
            else:
                result = rewrite_script(body, classes, ids)
            rewritten, count = result.text, result.replacements
        if count == 0:
            continue
        pieces.append(text[cursor : item.start])
        pieces.append(rewritten)
        cursor = item.end
        replacements += count
    if replacements == 0:
        return RewriteResult(text=text, replacements=0)
    pieces.append(text[cursor:])
    return RewriteResult(text="".join(pieces), replacements=replacements)


def inline_styles(text: str) -> list[str]:
    """Return the bodies of inline ``<style>`` elements in document order."""
    return [
        text[item.start : item.end]
        for item in _iter_markup(text)
        if isinstance(item, _RawText) and item.tag == "style"
    ]


def attribute_tokens(text: str, names: frozenset[str]) -> list[str]:
    """Return distinct tokens of the named attributes in document order.

    Args:
        text: Markup source.
        names: Lower-case attribute names, such as ``{"class"}``.

    Returns:
        Ordered distinct whitespace-separated tokens.
    """
    tokens: dict[str, None] = {}
    for item in _iter_markup(text):
        if isinstance(item, _Attribute) and item.name in names:
            for token in item.value.split():
                tokens.setdefault(token, None)
    return list(tokens)


def _rewrite_attribute(
    attribute: _Attribute,
    classes: Mapping[str, str],
    ids: Mapping[str, str],
) -> tuple[str, int]:
    """Rewrite one attribute value.

    Args:
        attribute: Attribute span.
        classes: Class name mapping.
        ids: Element id mapping.

    Returns:
        New value and number of substituted tokens.
    """
    name = attribute.name
    value = attribute.value
    if name == "class":
        return _rewrite_token_list(value, classes)
    if not ids:
        return value, 0
    if name in _ID_SINGLE_ATTRIBUTES or name in _ID_LIST_ATTRIBUTES:
        return _rewrite_token_list(value, ids)
    if name == "href" and value.startswith("#"):
        token = ids.get(value[1:])
        if token is not None:
            return f"#{token}", 1
    return value, 0


def _rewrite_token_list(value: str, table: Mapping[str, str]) -> tuple[str, int]:
    tokens = value.split()
    count = sum(1 for token in tokens if token in table)
    if count == 0:
        return value, 0
    return " ".join(table.get(token, token) for token in tokens), count


def _iter_markup(text: str) -> Iterator[_Attribute | _RawText]:
    """Yield start-tag attribute values and raw-text element bodies.

    Comments, doctype, processing instructions and end tags are skipped, as
    are the bodies of ``<textarea>`` and ``<title>``, which hold text only.

    Args:
        text: Markup source.

    Yields:
        Attribute and raw-text spans in document order.
    """
    length = len(text)
    position = 0
    while True:
        start = text.find("<", position)
        if start < 0:
            return
        if text.startswith("<!--", start):
            close = text.find("-->", start + 4)
            position = length if close < 0 else close + 3
            continue
        if text.startswith("<!", start) or text.startswith("<?", start):
            close = text.find(">", start + 2)
            position = length if close < 0 else close + 1
            continue
        match = _TAG_NAME.match(text, start)
        if match is None:
            position = start + 1
            continue
        closing = bool(match.group(1))
        tag = match.group(2).lower()
        cursor = match.end()
        while cursor < length:
            char = text[cursor]
            if char == ">":
                cursor += 1
                break
            if char.isspace() or char == "/":
                cursor += 1
                continue
            attribute = _ATTRIBUTE.match(text, cursor)
            if attribute is None:
                cursor += 1
                continue
            if not closing:
                value_group = next(
                    (group for group in (2, 3, 4) if attribute.group(group) is not None),
                    None,
                )
                if value_group is not None:
                    yield _Attribute(
                        tag=tag,
                        name=attribute.group(1).lower(),
                        value=attribute.group(value_group),
                        start=attribute.start(value_group),
                        end=attribute.end(value_group),
                    )
            cursor = attribute.end()
        position = cursor
        if closing or (tag not in _RAW_TEXT_TAGS and tag not in _PLAIN_TEXT_TAGS):
            continue
        end_tag = re.compile(rf"</{tag}\s*>", re.IGNORECASE).search(text, cursor)
        body_end = length if end_tag is None else end_tag.start()
        if tag in _RAW_TEXT_TAGS:
            yield _RawText(tag=tag, start=cursor, end=body_end)
        position = body_end
