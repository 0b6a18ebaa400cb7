# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Enumerate and classify build artifacts under a root directory."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Literal

import pathspec

from classmask.errors import ArtifactIOError, ArtifactNotFoundError

logger = logging.getLogger(__name__)

ArtifactKind = Literal["stylesheet", "markup", "script", "other"]

STYLESHEET_SUFFIXES: frozenset[str] = frozenset({".css"})
MARKUP_SUFFIXES: frozenset[str] = frozenset({".html", ".htm", ".xhtml", ".svg"})
SCRIPT_SUFFIXES: frozenset[str] = frozenset({".js", ".mjs", ".cjs"})
REWRITABLE_SUFFIXES: frozenset[str] = STYLESHEET_SUFFIXES | MARKUP_SUFFIXES | SCRIPT_SUFFIXES


def classify(path: Path) -> ArtifactKind:
    """Classify a file by suffix.

    Args:
        path: Artifact path.

    Returns:
        Artifact kind; ``other`` for files that are only copied.
    """
    suffix = path.suffix.lower()
    if suffix in STYLESHEET_SUFFIXES:
        return "stylesheet"
    if suffix in MARKUP_SUFFIXES:
        return "markup"
    if suffix in SCRIPT_SUFFIXES:
        return "script"
    return "other"


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-case suffixes and add the leading dot when missing.

    Raises:
        ValueError: If a suffix is empty.
    """
    normalized: set[str] = set()
    for extension in extensions:
        text = extension.strip().lower()
        if not text or text == ".":
            raise ValueError("Extension must not be empty")
        normalized.add(text if text.startswith(".") else f".{text}")
    return frozenset(normalized)


class PathExcluder:
    """Match root-relative artifact paths against gitignore-style patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        """Initialize excluder.

        Args:
            spec: Compiled gitignore matcher.
        """
        self._spec = spec

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> "PathExcluder":
        """Compile exclude patterns.

        Args:
            patterns: Gitignore-syntax lines.

        Returns:
            Configured excluder.
        """
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(list(patterns)))

    def matches(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check whether a path is excluded from rewriting.

        Args:
            relative_path: Root-relative POSIX path.
            is_dir: Whether the path is a directory.

        Returns:
            True when the path should be left unrewritten.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        if self._spec.match_file(normalized):
            return True
        if is_dir and self._spec.match_file(f"{normalized}/"):
            return True
        return False


def iter_artifacts(
    root: Path,
    extensions: Iterable[str],
    excluder: PathExcluder | None = None,
) -> Iterator[Path]:
    """Lazily enumerate files under root whose suffix is a rewrite target.

    Args:
        root: Directory to walk.
        extensions: Target suffixes.
        excluder: Optional matcher for paths left unrewritten.

    Returns:
        Generator of file paths in sorted depth-first order.

    Raises:
        ArtifactNotFoundError: If root is absent or not a directory.
    """
    if not root.is_dir():
        raise ArtifactNotFoundError(f"Artifact root does not exist: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ArtifactNotFoundError(f"Artifact root is not readable: {root}")
    targets = normalize_extensions(extensions)
    return _walk(root=root, current=root, targets=targets, excluder=excluder)


def _walk(
    root: Path,
    current: Path,
    targets: frozenset[str],
    excluder: PathExcluder | None,
) -> Iterator[Path]:
    try:
        children = sorted(current.iterdir(), key=lambda item: item.name)
    except OSError as exc:
        raise ArtifactIOError(f"Cannot list directory {current}: {exc}") from exc
    for child in children:
        relative = child.relative_to(root).as_posix()
        if child.is_symlink():
            logger.debug("Symlink left unrewritten (path=%s)", relative)
            continue
        is_dir = child.is_dir()
        if excluder is not None and excluder.matches(relative, is_dir=is_dir):
            logger.debug("Artifact excluded from rewriting (path=%s)", relative)
            continue
        if is_dir:
            yield from _walk(root=root, current=child, targets=targets, excluder=excluder)
            continue
        if child.suffix.lower() in targets:
            yield child
