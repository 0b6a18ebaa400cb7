# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for mapping artifact persistence."""

import json
from pathlib import Path

import pytest

from classmask.errors import MappingLoadError
from classmask.mapping import MappingTable
from classmask.store import MAPPING_FILENAME, MappingStore


def test_sto_001_save_writes_classes_timestamp_and_total(tmp_path: Path) -> None:
    store = MappingStore(data_dir=tmp_path / "data", fresh=True)

    store.save(classes=MappingTable({"hero": "a1", "hero-title": "a2"}))

    content = (tmp_path / "data" / MAPPING_FILENAME).read_text(encoding="utf-8")
    payload = json.loads(content)
    assert payload["classes"] == {"hero": "a1", "hero-title": "a2"}
    assert list(payload["classes"]) == ["hero", "hero-title"]
    assert payload["totalClasses"] == 2
    assert payload["timestamp"].endswith("Z")
    assert "ids" not in payload
    assert content.startswith('{\n  "classes"')
    assert content.endswith("\n")


def test_sto_002_compact_output_when_formatting_disabled(tmp_path: Path) -> None:
    store = MappingStore(data_dir=tmp_path, fresh=True, format_json=False)

    store.save(classes=MappingTable({"hero": "a1"}))

    content = store.path.read_text(encoding="utf-8")
    assert content.startswith('{"classes":{"hero":"a1"},')


def test_sto_003_ids_section_is_written_when_present(tmp_path: Path) -> None:
    store = MappingStore(data_dir=tmp_path, fresh=True)

    artifact = store.save(
        classes=MappingTable({"hero": "a1"}), ids=MappingTable({"main": "b1"})
    )

    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert payload["ids"] == {"main": "b1"}
    assert payload["totalIds"] == 1
    assert artifact.to_json() == payload


def test_sto_004_fresh_store_loads_nothing(tmp_path: Path) -> None:
    MappingStore(data_dir=tmp_path, fresh=True).save(classes=MappingTable({"hero": "a1"}))

    table = MappingStore(data_dir=tmp_path, fresh=True).load()

    assert len(table) == 0


def test_sto_005_incremental_store_loads_previous_sections(tmp_path: Path) -> None:
    MappingStore(data_dir=tmp_path, fresh=True).save(
        classes=MappingTable({"hero": "a1"}), ids=MappingTable({"main": "b1"})
    )
    store = MappingStore(data_dir=tmp_path, fresh=False)

    assert store.load().as_dict() == {"hero": "a1"}
    assert store.load(section="ids").as_dict() == {"main": "b1"}


def test_sto_006_missing_artifact_loads_empty(tmp_path: Path) -> None:
    store = MappingStore(data_dir=tmp_path / "absent", fresh=False)

    assert len(store.load()) == 0


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        '{"classes": []}',
        '{"classes": {"hero": ""}}',
        '{"classes": {"hero": "a1", "card": "a1"}}',
        '{"classes": {"hero": "a1"}, "totalClasses": 3}',
    ],
)
def test_sto_007_corrupt_artifact_raises_load_error(tmp_path: Path, content: str) -> None:
    (tmp_path / MAPPING_FILENAME).write_text(content, encoding="utf-8")
    store = MappingStore(data_dir=tmp_path, fresh=False)

    with pytest.raises(MappingLoadError):
        store.load()


def test_sto_008_discard_removes_data_directory(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    store = MappingStore(data_dir=data_dir, fresh=True)
    store.save(classes=MappingTable({"hero": "a1"}))

    assert store.discard() is True
    assert not data_dir.exists()
    assert store.discard() is False
