# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-artifact-kind rewriters applying a frozen mapping."""

from classmask.rewriters.markup import (
    CLASS_ATTRIBUTES,
    ID_ATTRIBUTES,
    attribute_tokens,
    inline_styles,
    rewrite_markup,
)
from classmask.rewriters.result import RewriteResult
from classmask.rewriters.script import rewrite_script
from classmask.rewriters.stylesheet import rewrite_stylesheet

__all__ = [
    "CLASS_ATTRIBUTES",
    "ID_ATTRIBUTES",
    "RewriteResult",
    "attribute_tokens",
    "inline_styles",
    "rewrite_markup",
    "rewrite_script",
    "rewrite_stylesheet",
]
