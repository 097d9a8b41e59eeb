"""Unit tests for the in-memory equipment repository."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

import pytest

from equipcare.domain import (
    ConcurrencyConflictError,
    Equipment,
    EquipmentStatus,
    MaintenanceRecord,
    NotFoundError,
    RecordType,
    ValidationError,
)
from equipcare.storage import InMemoryEquipmentStore

T0 = datetime(2024, 6, 1, 10, 0, tzinfo=UTC)


def _equipment() -> Equipment:
    return Equipment(equipment_id="mixers", name="Mixers", category="preparation", maintenance_interval_days=30)


def _note(record_id: str, equipment_id: str = "mixers") -> MaintenanceRecord:
    return MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment_id,
        date=T0,
        type=RecordType.NOTE,
        notes="checked",
    )


def test_add_and_load_equipment() -> None:
    store = InMemoryEquipmentStore()
    stored = store.add_equipment(replace(_equipment(), version=4))

    assert stored.version == 0
    assert store.load_equipment("mixers") == stored
    with pytest.raises(ValidationError, match="already exists"):
        store.add_equipment(_equipment())
    with pytest.raises(NotFoundError):
        store.load_equipment("ovens")


def test_commit_saves_state_and_records_together() -> None:
    store = InMemoryEquipmentStore()
    current = store.add_equipment(_equipment())

    stored = store.commit(
        replace(current, status=EquipmentStatus.REPAIR),
        [_note("r1")],
        expected_version=current.version,
    )

    assert stored.version == 1
    assert store.load_equipment("mixers").status == EquipmentStatus.REPAIR
    assert [record.record_id for record in store.list_records("mixers")] == ["r1"]


def test_stale_version_is_rejected_without_writing() -> None:
    store = InMemoryEquipmentStore()
    current = store.add_equipment(_equipment())
    store.commit(current, [_note("r1")], expected_version=0)

    with pytest.raises(ConcurrencyConflictError):
        store.commit(replace(current, status=EquipmentStatus.REPAIR), [_note("r2")], expected_version=0)

    assert store.load_equipment("mixers").status == EquipmentStatus.OPERATIONAL
    assert [record.record_id for record in store.list_records("mixers")] == ["r1"]


def test_duplicate_record_rolls_back_commit() -> None:
    store = InMemoryEquipmentStore()
    current = store.add_equipment(_equipment())
    current = store.commit(current, [_note("r1")], expected_version=0)

    with pytest.raises(ValidationError, match="duplicate"):
        store.commit(replace(current, status=EquipmentStatus.REPAIR), [_note("r1")], expected_version=1)

    assert store.load_equipment("mixers").version == 1
    assert store.load_equipment("mixers").status == EquipmentStatus.OPERATIONAL


def test_records_must_belong_to_equipment() -> None:
    store = InMemoryEquipmentStore()
    current = store.add_equipment(_equipment())

    with pytest.raises(ValidationError):
        store.commit(current, [_note("r1", equipment_id="scales")], expected_version=0)
    with pytest.raises(ValidationError):
        store.append_record("mixers", _note("r1", equipment_id="scales"))


def test_save_equipment_and_delete_record() -> None:
    store = InMemoryEquipmentStore()
    current = store.add_equipment(_equipment())
    store.append_record("mixers", _note("r1"))

    saved = store.save_equipment(replace(current, name="Stand Mixers"))
    removed = store.delete_record("mixers", "r1")

    assert saved.version == 1
    assert saved.name == "Stand Mixers"
    assert removed.record_id == "r1"
    assert store.list_records("mixers") == ()
    with pytest.raises(NotFoundError):
        store.delete_record("mixers", "r1")
    with pytest.raises(NotFoundError):
        store.append_record("ovens", _note("x", equipment_id="ovens"))
