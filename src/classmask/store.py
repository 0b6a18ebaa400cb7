# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Load and persist the mapping artifact consumed by verification tooling."""

import json
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from classmask.errors import MappingError, MappingLoadError
from classmask.mapping import MappingTable

logger = logging.getLogger(__name__)

MAPPING_FILENAME = "main.json"


@dataclass(frozen=True)
class MappingArtifact:
    """Represent the persisted mapping record.

    Attributes:
        classes: Original class name to token, in discovery order.
        timestamp: ISO-8601 UTC generation time.
        total_classes: Number of class entries.
        ids: Original element id to token, when ids are enabled.
    """

    classes: dict[str, str]
    timestamp: str
    total_classes: int
    ids: dict[str, str] | None = None

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "classes": self.classes,
            "timestamp": self.timestamp,
            "totalClasses": self.total_classes,
        }
        if self.ids is not None:
            payload["ids"] = self.ids
            payload["totalIds"] = len(self.ids)
        return payload


class MappingStore:
    """Persist mapping tables under one data directory."""

    def __init__(self, data_dir: Path, fresh: bool, format_json: bool = True) -> None:
        """Initialize store.

        Args:
            data_dir: Directory holding the mapping artifact.
            fresh: Ignore and discard any earlier artifact.
            format_json: Write indented JSON when True.
        """
        self._data_dir = data_dir
        self._fresh = fresh
        self._format_json = format_json

    @property
    def path(self) -> Path:
        return self._data_dir / MAPPING_FILENAME

    def discard(self) -> bool:
        """Delete the data directory.

        Returns:
            True when a directory was removed.

        Raises:
            OSError: If removal fails.
        """
        if not self._data_dir.exists():
            return False
        shutil.rmtree(self._data_dir)
        logger.info("Removed mapping data (path=%s)", self._data_dir)
        return True

    def load(self, section: str = "classes") -> MappingTable:
        """Load one mapping section as an unfrozen table.

        Args:
            section: ``classes`` or ``ids``.

        Returns:
            Loaded table; empty in fresh mode or when no artifact exists.

        Raises:
            MappingLoadError: If the artifact exists but cannot be used.
        """
        if self._fresh or not self.path.exists():
            return MappingTable()
        payload = self.read()
        entries = payload.get(section)
        if entries is None:
            return MappingTable()
        if not isinstance(entries, dict):
            raise MappingLoadError(f"Mapping section {section!r} must be an object")
        for original, token in entries.items():
            if not isinstance(token, str) or not token:
                raise MappingLoadError(
                    f"Mapping for {original!r} must be a non-empty string"
                )
        count_key = "totalClasses" if section == "classes" else "totalIds"
        count = payload.get(count_key)
        if count is not None and count != len(entries):
            raise MappingLoadError(
                f"{count_key} is {count} but {len(entries)} entries are present"
            )
        try:
            table = MappingTable(entries)
        except MappingError as exc:
            raise MappingLoadError(str(exc)) from exc
        logger.info(
            "Loaded previous mapping (path=%s section=%s entries=%s)",
            self.path,
            section,
            len(table),
        )
        return table

    def read(self) -> dict[str, Any]:
        """Read the raw artifact payload.

        Raises:
            MappingLoadError: If the file is unreadable or not a JSON object.
        """
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MappingLoadError(f"Cannot read mapping {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise MappingLoadError(f"Mapping {self.path} must contain a JSON object")
        return payload

    def save(self, classes: MappingTable, ids: MappingTable | None = None) -> MappingArtifact:
        """Write the artifact atomically, creating parent directories.

        Args:
            classes: Class mapping table.
            ids: Element id mapping table, when ids are enabled.

        Returns:
            The persisted artifact.

        Raises:
            OSError: If directory creation or writing fails.
        """
        artifact = MappingArtifact(
            classes=classes.as_dict(),
            timestamp=_utc_timestamp(),
            total_classes=len(classes),
            ids=None if ids is None else ids.as_dict(),
        )
        indent = 2 if self._format_json else None
        separators = None if self._format_json else (",", ":")
        content = json.dumps(
            artifact.to_json(), indent=indent, separators=separators, ensure_ascii=False
        )
        self._data_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(content + "\n", encoding="utf-8")
        tmp_path.replace(self.path)
        logger.info(
            "Saved mapping (path=%s classes=%s)", self.path, artifact.total_classes
        )
        return artifact


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
