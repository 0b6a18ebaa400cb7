# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Stage an artifact tree into its destination root."""

import logging
import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path

from classmask.errors import ArtifactIOError, ArtifactNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactTree:
    """Represent source and destination roots for one run.

    Args:
        source: Build output root, read-only.
        destination: Root receiving rewritten artifacts.
    """

    source: Path
    destination: Path

    @property
    def in_place(self) -> bool:
        """True when rewriting happens directly in the source root."""
        return self.source.resolve() == self.destination.resolve()


@dataclass(frozen=True)
class CopySummary:
    """Represent copy phase counters."""

    files_copied: int
    dirs_created: int
    elapsed_ms: int


def validate_tree(tree: ArtifactTree) -> None:
    """Check root constraints before any file is touched.

    Raises:
        ArtifactNotFoundError: If the source root is missing.
        ArtifactIOError: If the destination is nested inside the source or vice versa.
    """
    source = tree.source.resolve()
    destination = tree.destination.resolve()
    if not source.is_dir():
        raise ArtifactNotFoundError(f"Source path does not exist: {source}")
    if source == destination:
        return
    if source in destination.parents or destination in source.parents:
        raise ArtifactIOError("Source and destination paths must not overlap")


def clear_destination(tree: ArtifactTree) -> bool:
    """Remove a staged destination left by an earlier run.

    Args:
        tree: Artifact tree.

    Returns:
        True when a directory was removed.
    """
    if tree.in_place or not tree.destination.exists():
        return False
    shutil.rmtree(tree.destination)
    logger.info("Removed previous output (path=%s)", tree.destination)
    return True


def copy_tree(tree: ArtifactTree) -> CopySummary:
    """Copy every file of the source tree into the destination.

    Args:
        tree: Artifact tree; in-place trees are left as they are.

    Returns:
        Copy summary counters.

    Raises:
        ArtifactIOError: If a file or directory cannot be copied.
    """
    started = time.monotonic()
    if tree.in_place:
        return CopySummary(files_copied=0, dirs_created=0, elapsed_ms=0)
    files_copied = 0
    dirs_created = 0
    queue: list[Path] = [tree.source]
    try:
        tree.destination.mkdir(parents=True, exist_ok=True)
        while queue:
            current = queue.pop(0)
            for child in sorted(current.iterdir(), key=lambda item: item.name):
                destination = tree.destination / child.relative_to(tree.source)
                if child.is_symlink():
                    if destination.exists() or destination.is_symlink():
                        destination.unlink()
                    destination.symlink_to(os.readlink(child))
                    files_copied += 1
                    continue
                if child.is_dir():
                    queue.append(child)
                    if not destination.exists():
                        destination.mkdir(parents=True)
                        dirs_created += 1
                    continue
                shutil.copy2(child, destination)
                files_copied += 1
    except OSError as exc:
        raise ArtifactIOError(f"Copy failed: {exc}") from exc

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    return CopySummary(
        files_copied=files_copied,
        dirs_created=dirs_created,
        elapsed_ms=elapsed_ms,
    )


def read_artifact(path: Path) -> str:
    """Read artifact text without newline translation.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not UTF-8.
    """
    return path.read_bytes().decode("utf-8")


def write_atomic(path: Path, content: str) -> None:
    """Replace file content through a temporary sibling.

    Raises:
        OSError: If writing or replacing fails.
    """
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    try:
        tmp_path.write_bytes(content.encode("utf-8"))
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
