"""Unit tests for the append-only maintenance event log."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from equipcare.domain import EquipmentStatus, MaintenanceRecord, NotFoundError, RecordType, ValidationError
from equipcare.lifecycle import EventLog, derive_status, record_key

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


def _record(
    record_id: str | None,
    *,
    minutes: int = 0,
    equipment_id: str = "mixers",
    previous: EquipmentStatus | None = None,
    new: EquipmentStatus | None = None,
) -> MaintenanceRecord:
    return MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment_id,
        date=T0 + timedelta(minutes=minutes),
        type=RecordType.NOTE if new is None else None,
        notes="entry",
        previous_status=previous,
        new_status=new,
    )


def test_records_are_listed_in_insertion_order_per_equipment() -> None:
    log = EventLog()
    log.append(_record("b", minutes=5))
    log.append(_record("a", minutes=1))
    log.append(_record("x", equipment_id="scales"))

    assert [record.record_id for record in log.list_for("mixers")] == ["b", "a"]
    assert [record.record_id for record in log.list_for("scales")] == ["x"]
    assert log.list_for("unknown") == ()
    assert set(log.equipment_ids()) == {"mixers", "scales"}


def test_record_key_falls_back_to_iso_date() -> None:
    record = _record(None, minutes=3)

    assert record_key(record) == (T0 + timedelta(minutes=3)).isoformat()
    assert record_key(_record("abc")) == "abc"


def test_duplicate_in_batch_rejects_whole_batch() -> None:
    log = EventLog()
    log.append(_record("a"))

    with pytest.raises(ValidationError, match="duplicate"):
        log.extend([_record("b"), _record("a", minutes=2)])

    assert [record.record_id for record in log.list_for("mixers")] == ["a"]


def test_delete_one_by_id_and_by_date() -> None:
    log = EventLog()
    log.append(_record("a"))
    log.append(_record(None, minutes=7))

    removed = log.delete_one("mixers", "a")
    assert removed.record_id == "a"
    log.delete_one("mixers", (T0 + timedelta(minutes=7)).isoformat())

    assert log.list_for("mixers") == ()
    with pytest.raises(NotFoundError):
        log.delete_one("mixers", "a")


def test_deleted_key_can_be_reused() -> None:
    log = EventLog()
    log.append(_record("a"))
    log.delete_one("mixers", "a")
    log.append(_record("a", minutes=1))

    assert len(log.list_for("mixers")) == 1


def test_derive_status_uses_newest_status_change() -> None:
    records = [
        _record("1", previous=EquipmentStatus.OPERATIONAL, new=EquipmentStatus.REPAIR),
        _record("2"),
        _record("3", previous=EquipmentStatus.REPAIR, new=EquipmentStatus.OPERATIONAL),
        _record("4"),
    ]

    assert derive_status(records) == EquipmentStatus.OPERATIONAL
    assert derive_status(records[:2]) == EquipmentStatus.REPAIR
    assert derive_status([]) == EquipmentStatus.OPERATIONAL
