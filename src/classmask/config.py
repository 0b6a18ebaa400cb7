# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Load and validate the frozen per-run obfuscation configuration."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, cast

from classmask.errors import ConfigError
from classmask.extractor import is_identifier
from classmask.ignore import IgnoreRule, parse_rules
from classmask.naming import Strategy
from classmask.scanner import REWRITABLE_SUFFIXES, normalize_extensions

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".css", ".html", ".js")
STRATEGIES: frozenset[str] = frozenset({"random", "sequential"})


@dataclass(frozen=True)
class ObfuscationConfig:
    """Represent every option recognized for one run.

    Attributes:
        enable: Master switch for the whole pipeline.
        length: Core length of random tokens.
        class_method: Token generation strategy.
        class_prefix: Literal prepended to every class token.
        class_suffix: Literal appended to every class token.
        class_ignore: Rules exempting classes from renaming.
        extensions: Suffixes rewritten in addition to stylesheets.
        fresh: Discard previous mapping and output before running.
        keep_data: Keep the mapping artifact after the run.
        format_json: Write the mapping artifact indented.
        show_config: Log the effective configuration at start.
        ids: Rename element ids as well.
        id_method: Token generation strategy for ids.
        id_ignore: Rules exempting ids from renaming.
        excludes: Gitignore-style paths copied but never rewritten.
        src_path: Build output root.
        des_path: Destination root; equal to ``src_path`` for in-place runs.
        jsons_path: Directory holding the mapping artifact.
        seed: Seed for the random strategy.
        workers: Thread pool size for per-file work.
    """

    enable: bool = True
    length: int = 6
    class_method: Strategy = "random"
    class_prefix: str = ""
    class_suffix: str = ""
    class_ignore: tuple[IgnoreRule, ...] = ()
    extensions: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_EXTENSIONS)
    )
    fresh: bool = True
    keep_data: bool = True
    format_json: bool = True
    show_config: bool = False
    ids: bool = False
    id_method: Strategy = "random"
    id_ignore: tuple[IgnoreRule, ...] = ()
    excludes: tuple[str, ...] = ()
    src_path: Path = Path("dist")
    des_path: Path = Path("dist-obfuscated")
    jsons_path: Path = Path("obfuscation-data")
    seed: int | None = None
    workers: int = 4

    def describe(self) -> dict[str, Any]:
        """Render options as plain values for logging."""
        described: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if item.name in ("class_ignore", "id_ignore"):
                value = [rule.pattern for rule in value]
            elif isinstance(value, frozenset):
                value = sorted(value)
            elif isinstance(value, Path):
                value = str(value)
            described[item.name] = value
        return described


_BOOL_KEYS: dict[str, str] = {
    "enable": "enable",
    "fresh": "fresh",
    "keepData": "keep_data",
    "formatJson": "format_json",
    "showConfig": "show_config",
    "ids": "ids",
}
_PATH_KEYS: dict[str, str] = {
    "srcPath": "src_path",
    "desPath": "des_path",
    "jsonsPath": "jsons_path",
    "jsonDataPath": "jsons_path",
}
_LIST_KEYS: frozenset[str] = frozenset(
    {"classIgnore", "idIgnore", "extensions", "excludes", "htmlExcludes", "cssExcludes"}
)
_OTHER_KEYS: frozenset[str] = frozenset(
    {"length", "classMethod", "idMethod", "classPrefix", "classSuffix", "seed", "workers"}
)
KNOWN_KEYS: frozenset[str] = (
    frozenset(_BOOL_KEYS) | frozenset(_PATH_KEYS) | _LIST_KEYS | _OTHER_KEYS
)


def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ObfuscationConfig:
    """Load configuration from a JSON file and apply overrides.

    Args:
        path: Optional JSON file with camelCase option keys.
        overrides: Option values taking precedence over the file.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If the file is unreadable or any option is invalid.
    """
    raw: dict[str, Any] = {}
    base_dir = Path.cwd()
    if path is not None:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        raw.update(payload)
        base_dir = path.resolve().parent
    for key, value in (overrides or {}).items():
        if value is not None:
            raw[key] = value
    return config_from_mapping(raw, base_dir=base_dir)


def config_from_mapping(raw: Mapping[str, Any], base_dir: Path) -> ObfuscationConfig:
    """Build configuration from camelCase option values.

    Args:
        raw: Option values keyed by their configuration names.
        base_dir: Directory that relative paths resolve against.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If a key is unknown or a value is invalid.
    """
    unknown = sorted(set(raw) - KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, attribute in _BOOL_KEYS.items():
        if key in raw:
            values[attribute] = _expect_bool(key, raw[key])
    for key, attribute in _PATH_KEYS.items():
        if key in raw:
            values[attribute] = _resolve_path(base_dir, _expect_str(key, raw[key]))
    for attribute in ("src_path", "des_path", "jsons_path"):
        if attribute not in values:
            default = getattr(ObfuscationConfig, attribute)
            values[attribute] = _resolve_path(base_dir, str(default))

    if "length" in raw:
        values["length"] = _expect_positive_int("length", raw["length"])
    if "workers" in raw:
        values["workers"] = _expect_positive_int("workers", raw["workers"])
    if "seed" in raw and raw["seed"] is not None:
        values["seed"] = _expect_int("seed", raw["seed"])
    for key, attribute in (("classMethod", "class_method"), ("idMethod", "id_method")):
        if key in raw:
            values[attribute] = _expect_strategy(key, raw[key])
    for key, attribute in (("classPrefix", "class_prefix"), ("classSuffix", "class_suffix")):
        if key in raw:
            values[attribute] = _expect_str(key, raw[key])
    _validate_affixes(values.get("class_prefix", ""), values.get("class_suffix", ""))

    for key, attribute in (("classIgnore", "class_ignore"), ("idIgnore", "id_ignore")):
        if key in raw:
            try:
                values[attribute] = parse_rules(_expect_str_list(key, raw[key]))
            except ValueError as exc:
                raise ConfigError(f"Invalid {key}: {exc}") from exc
    if "extensions" in raw:
        values["extensions"] = _validate_extensions(
            _expect_str_list("extensions", raw["extensions"])
        )
    excludes: list[str] = []
    for key in ("excludes", "htmlExcludes", "cssExcludes"):
        if key in raw:
            excludes.extend(_expect_str_list(key, raw[key]))
    if excludes:
        values["excludes"] = tuple(dict.fromkeys(excludes))

    config = ObfuscationConfig(**values)
    if config.show_config:
        logger.info("Effective configuration (config=%s)", config.describe())
    return config


def _validate_affixes(prefix: str, suffix: str) -> None:
    if not is_identifier(f"{prefix}a{suffix}"):
        raise ConfigError(
            f"classPrefix/classSuffix must form a plain CSS identifier: {prefix!r}, {suffix!r}"
        )


def _validate_extensions(extensions: list[str]) -> frozenset[str]:
    try:
        normalized = normalize_extensions(extensions)
    except ValueError as exc:
        raise ConfigError(f"Invalid extensions: {exc}") from exc
    unsupported = sorted(normalized - REWRITABLE_SUFFIXES)
    if unsupported:
        raise ConfigError(f"Unsupported extensions: {', '.join(unsupported)}")
    return normalized


def _resolve_path(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def _expect_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be a boolean")
    return value


def _expect_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer")
    return value


def _expect_positive_int(key: str, value: Any) -> int:
    number = _expect_int(key, value)
    if number <= 0:
        raise ConfigError(f"{key} must be > 0")
    return number


def _expect_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value


def _expect_str_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings")
    return list(value)


def _expect_strategy(key: str, value: Any) -> Strategy:
    text = _expect_str(key, value)
    if text not in STRATEGIES:
        raise ConfigError(f"{key} must be one of: {', '.join(sorted(STRATEGIES))}")
    return cast(Strategy, text)
