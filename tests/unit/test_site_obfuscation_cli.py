# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the site obfuscation CLI."""

import io
import json
import re
from pathlib import Path
from typing import Callable

from cli.site_obfuscation import run

WriteFile = Callable[[Path, str], Path]


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _site(tmp_path: Path, write_file: WriteFile) -> list[str]:
    write_file(tmp_path / "dist" / "index.html", '<div class="hero hero-title"></div>')
    write_file(tmp_path / "dist" / "style.css", ".hero{color:red}.hero-title{color:blue}")
    return [
        "--input",
        str(tmp_path / "dist"),
        "--output",
        str(tmp_path / "out"),
        "--data-dir",
        str(tmp_path / "data"),
    ]


def test_cli_001_rejects_malformed_arguments() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    assert run(["--length", "six"], stdout=stdout, stderr=stderr) == 2
    assert run(["--fresh", "--incremental"], stdout=stdout, stderr=stderr) == 2
    assert run(["--method", "shuffle"], stdout=stdout, stderr=stderr) == 2


def test_cli_002_invalid_config_value_exits_before_work(
    tmp_path: Path, write_file: WriteFile
) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [*_site(tmp_path, write_file), "--length", "0"], stdout=stdout, stderr=stderr
    )

    assert exit_code == 2
    assert stderr.getvalue().startswith("[fatal] ")
    assert "length must be > 0" in stderr.getvalue()
    assert not (tmp_path / "out").exists()


def test_cli_003_successful_run_prints_markers_and_summary(
    tmp_path: Path, write_file: WriteFile
) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [*_site(tmp_path, write_file), "--method", "sequential"],
        stdout=stdout,
        stderr=stderr,
    )

    output = _strip_ansi(stdout.getvalue())
    assert exit_code == 0
    assert stderr.getvalue() == ""
    for marker in ("config", "copy", "extract", "stylesheet", "markup", "script", "report"):
        assert f"{marker}:start" in output
        assert f"{marker}:done" in output
    assert "classes_mapped=2" in output
    assert "sample hero -> a1" in output
    assert output.strip().endswith("status=success")
    assert (tmp_path / "out" / "index.html").read_text() == '<div class="a1 a2"></div>'


def test_cli_004_ignore_flag_is_repeatable(tmp_path: Path, write_file: WriteFile) -> None:
    args = _site(tmp_path, write_file)

    exit_code = run(
        [*args, "--method", "sequential", "--ignore", "hero", "--ignore", "x-*"],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )

    assert exit_code == 0
    payload = json.loads((tmp_path / "data" / "main.json").read_text(encoding="utf-8"))
    assert payload["classes"] == {"hero-title": "a1"}


def test_cli_005_failed_run_reports_failing_state(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(tmp_path / "missing"), "--output", str(tmp_path / "out")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert stderr.getvalue().startswith("[fatal] ")
    assert "status=failed state=clean" in _strip_ansi(stdout.getvalue())


def test_cli_006_disabled_config_file_exits_cleanly(
    tmp_path: Path, write_file: WriteFile
) -> None:
    config_path = write_file(tmp_path / "obfuscation.json", json.dumps({"enable": False}))
    stdout = io.StringIO()

    exit_code = run(["--config", str(config_path)], stdout=stdout, stderr=io.StringIO())

    assert exit_code == 0
    assert "status=disabled" in _strip_ansi(stdout.getvalue())


def test_cli_007_config_file_paths_resolve_against_its_directory(
    tmp_path: Path, write_file: WriteFile
) -> None:
    _site(tmp_path, write_file)
    config_path = write_file(
        tmp_path / "obfuscation.json",
        json.dumps(
            {
                "srcPath": "dist",
                "desPath": "site",
                "jsonsPath": "maps",
                "classMethod": "sequential",
                "formatJson": False,
            }
        ),
    )

    exit_code = run(["--config", str(config_path)], stdout=io.StringIO(), stderr=io.StringIO())

    assert exit_code == 0
    assert (tmp_path / "site" / "style.css").read_text() == ".a1{color:red}.a2{color:blue}"
    assert (tmp_path / "maps" / "main.json").read_text(encoding="utf-8").startswith(
        '{"classes":{"hero":"a1","hero-title":"a2"}'
    )
