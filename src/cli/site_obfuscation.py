# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run class obfuscation over a compiled site tree."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from classmask import ConfigError, Pipeline, load_config
from classmask.pipeline import RunReport
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="classmask")
    parser.add_argument("--config", help="JSON file with camelCase options.")
    parser.add_argument("--input", help="Compiled site root (srcPath).")
    parser.add_argument("--output", help="Destination root (desPath).")
    parser.add_argument("--data-dir", help="Mapping artifact directory (jsonsPath).")
    parser.add_argument(
        "--method", choices=["random", "sequential"], help="Token generation strategy."
    )
    parser.add_argument("--length", type=int, help="Random token core length.")
    parser.add_argument("--prefix", help="Literal prepended to every token.")
    parser.add_argument("--suffix", help="Literal appended to every token.")
    parser.add_argument(
        "--ignore",
        action="append",
        help="Class name or prefix* pattern left untouched; repeatable.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--fresh",
        dest="fresh",
        action="store_true",
        default=None,
        help="Discard earlier mapping and output first.",
    )
    mode.add_argument(
        "--incremental",
        dest="fresh",
        action="store_false",
        help="Reuse the earlier mapping.",
    )
    parser.add_argument("--seed", type=int, help="Seed for the random strategy.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run obfuscation command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    _emit_marker(console=console, phase="config", state="start")
    try:
        config = load_config(
            path=Path(args.config).resolve() if args.config else None,
            overrides=_overrides(args),
        )
    except ConfigError as exc:
        logger.warning("Configuration rejected (error=%s)", exc)
        stderr.write(f"[fatal] {exc}\n")
        return 2
    _emit_marker(console=console, phase="config", state="done")

    pipeline = Pipeline(
        config=config,
        on_phase=lambda phase, state: _emit_marker(console=console, phase=phase, state=state),
    )
    result = pipeline.run()
    if result.disabled:
        console.print("status=disabled")
        return 0
    report = result.report
    if result.error is not None or report is None:
        stderr.write(f"[fatal] {result.error}\n")
        failed_at = result.error.state if result.error is not None else result.state.value
        console.print(f"status=failed state={failed_at}", highlight=False)
        return 2

    _emit_report(console=console, report=report)
    console.print("status=success")
    return 0


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed flags into configuration overrides.

    Paths are made absolute so they do not resolve against the config file.
    """
    return {
        "srcPath": _absolute(args.input),
        "desPath": _absolute(args.output),
        "jsonsPath": _absolute(args.data_dir),
        "classMethod": args.method,
        "length": args.length,
        "classPrefix": args.prefix,
        "classSuffix": args.suffix,
        "classIgnore": args.ignore,
        "fresh": args.fresh,
        "seed": args.seed,
    }


def _absolute(value: str | None) -> str | None:
    if value is None:
        return None
    return str(Path(value).resolve())


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, Any]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields, soft_wrap=True, highlight=False)


def _emit_report(console: Console, report: RunReport) -> None:
    _emit_summary(console=console, summary=report.summary_fields())
    _emit_summary(
        console=console,
        summary={
            "output": report.output_root,
            "mapping": report.mapping_path,
            "mapping_kept": str(report.mapping_kept).lower(),
        },
    )
    for original, token in report.samples:
        console.print(f"sample {original} -> {token}", markup=False, highlight=False)
    for path in report.scripts.skipped_paths:
        console.print(f"skipped_script={path}", markup=False, highlight=False)


def main() -> None:
    """Run class obfuscation CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
