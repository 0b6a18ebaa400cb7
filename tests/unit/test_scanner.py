# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for artifact enumeration and tree staging."""

from pathlib import Path
from typing import Callable

import pytest

from classmask.errors import ArtifactIOError, ArtifactNotFoundError
from classmask.scanner import PathExcluder, classify, iter_artifacts, normalize_extensions
from classmask.tree import (
    ArtifactTree,
    clear_destination,
    copy_tree,
    read_artifact,
    validate_tree,
    write_atomic,
)

WriteFile = Callable[[Path, str], Path]


def test_scn_001_classify_by_suffix() -> None:
    assert classify(Path("a/site.CSS")) == "stylesheet"
    assert classify(Path("index.html")) == "markup"
    assert classify(Path("icon.svg")) == "markup"
    assert classify(Path("app.mjs")) == "script"
    assert classify(Path("logo.png")) == "other"


def test_scn_002_normalize_extensions() -> None:
    assert normalize_extensions(["HTML", ".js", " .css "]) == frozenset(
        {".html", ".js", ".css"}
    )
    with pytest.raises(ValueError):
        normalize_extensions([""])


def test_scn_003_missing_root_fails_before_iteration(tmp_path: Path) -> None:
    with pytest.raises(ArtifactNotFoundError):
        iter_artifacts(tmp_path / "missing", [".css"])


def test_scn_004_enumerates_matching_files_in_sorted_order(
    tmp_path: Path, write_file: WriteFile
) -> None:
    write_file(tmp_path / "b.css", "")
    write_file(tmp_path / "a.html", "")
    write_file(tmp_path / "sub" / "c.js", "")
    write_file(tmp_path / "sub" / "d.txt", "")

    found = [
        path.relative_to(tmp_path).as_posix()
        for path in iter_artifacts(tmp_path, [".css", ".html", ".js"])
    ]

    assert found == ["a.html", "b.css", "sub/c.js"]


def test_scn_005_excluded_paths_are_skipped(tmp_path: Path, write_file: WriteFile) -> None:
    write_file(tmp_path / "main.css", "")
    write_file(tmp_path / "vendor" / "lib.css", "")
    write_file(tmp_path / "pages" / "legacy.html", "")
    excluder = PathExcluder.from_patterns(["vendor/", "*.html"])

    found = [
        path.relative_to(tmp_path).as_posix()
        for path in iter_artifacts(tmp_path, [".css", ".html"], excluder)
    ]

    assert found == ["main.css"]


def test_scn_006_copy_tree_mirrors_source(tmp_path: Path, write_file: WriteFile) -> None:
    source = tmp_path / "dist"
    write_file(source / "index.html", "<p></p>")
    write_file(source / "assets" / "css" / "site.css", ".a{}")
    tree = ArtifactTree(source=source, destination=tmp_path / "out")

    summary = copy_tree(tree)

    assert summary.files_copied == 2
    assert summary.dirs_created == 2
    assert (tmp_path / "out" / "assets" / "css" / "site.css").read_text() == ".a{}"
    assert (source / "index.html").read_text() == "<p></p>"


def test_scn_007_in_place_tree_is_not_copied(tmp_path: Path, write_file: WriteFile) -> None:
    write_file(tmp_path / "index.html", "")
    tree = ArtifactTree(source=tmp_path, destination=tmp_path)

    assert tree.in_place
    assert copy_tree(tree).files_copied == 0
    assert clear_destination(tree) is False
    assert (tmp_path / "index.html").exists()


def test_scn_008_validate_tree_rejects_missing_and_overlapping_roots(
    tmp_path: Path,
) -> None:
    with pytest.raises(ArtifactNotFoundError):
        validate_tree(ArtifactTree(source=tmp_path / "missing", destination=tmp_path / "o"))
    with pytest.raises(ArtifactIOError):
        validate_tree(ArtifactTree(source=tmp_path, destination=tmp_path / "out"))


def test_scn_009_clear_destination_removes_previous_output(
    tmp_path: Path, write_file: WriteFile
) -> None:
    write_file(tmp_path / "dist" / "a.css", "")
    write_file(tmp_path / "out" / "stale.css", "")
    tree = ArtifactTree(source=tmp_path / "dist", destination=tmp_path / "out")

    assert clear_destination(tree) is True
    assert not (tmp_path / "out").exists()


def test_scn_010_atomic_write_keeps_bytes_verbatim(tmp_path: Path) -> None:
    path = tmp_path / "page.html"
    path.write_bytes(b"old")

    write_atomic(path, "line1\r\nline2é\n")

    assert path.read_bytes() == "line1\r\nline2é\n".encode("utf-8")
    assert read_artifact(path) == "line1\r\nline2é\n"
    assert sorted(item.name for item in tmp_path.iterdir()) == ["page.html"]
