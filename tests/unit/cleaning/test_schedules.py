"""Unit tests for cleaning schedule edits."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from equipcare.cleaning import (
    add_schedule,
    create_schedule,
    find_schedule,
    remove_schedule,
    replace_schedule,
    revise_schedule,
)
from equipcare.domain import ChecklistItem, CleaningFrequency, Equipment, NotFoundError, ValidationError

T0 = datetime(2024, 4, 1, 6, 0, tzinfo=UTC)


def _equipment() -> Equipment:
    return Equipment(
        equipment_id="walk_in_cooler",
        name="Walk-in Cooler",
        category="refrigeration",
        maintenance_interval_days=90,
    )


def test_create_schedule_is_due_one_interval_after_creation() -> None:
    schedule = create_schedule(
        name=" Shelves ",
        frequency="biweekly",
        created_at=T0,
        checklist=[{"name": "Remove stock", "isRequired": True}],
    )

    assert schedule.name == "Shelves"
    assert schedule.frequency == CleaningFrequency.BIWEEKLY
    assert schedule.next_due == T0 + timedelta(days=14)
    assert schedule.checklist == (ChecklistItem(name="Remove stock", is_required=True),)
    assert schedule.last_completed is None


def test_add_and_find_schedule() -> None:
    equipment = add_schedule(_equipment(), create_schedule(name="Floor", frequency="daily", created_at=T0))

    assert find_schedule(equipment, "Floor").frequency == CleaningFrequency.DAILY
    with pytest.raises(NotFoundError):
        find_schedule(equipment, "Ceiling")
    with pytest.raises(ValidationError, match="already exists"):
        add_schedule(equipment, create_schedule(name="Floor", frequency="weekly", created_at=T0))


def test_frequency_change_reanchors_next_due() -> None:
    schedule = create_schedule(name="Coils", frequency="monthly", created_at=T0)
    edited_at = T0 + timedelta(days=3)

    revised = revise_schedule(schedule, at=edited_at, frequency="weekly")

    assert revised.frequency == CleaningFrequency.WEEKLY
    assert revised.next_due == edited_at + timedelta(days=7)


def test_edits_without_frequency_change_keep_next_due() -> None:
    schedule = create_schedule(name="Coils", frequency="monthly", created_at=T0)

    revised = revise_schedule(
        schedule,
        at=T0 + timedelta(days=3),
        name="Condenser coils",
        frequency="MONTHLY",
        description=" vacuum ",
        checklist=[],
    )

    assert revised.next_due == schedule.next_due
    assert revised.name == "Condenser coils"
    assert revised.description == "vacuum"
    assert revised.checklist == ()


def test_replace_schedule_keeps_position_and_blocks_duplicate_rename() -> None:
    equipment = _equipment()
    for name in ("A", "B", "C"):
        equipment = add_schedule(equipment, create_schedule(name=name, frequency="daily", created_at=T0))

    renamed = revise_schedule(find_schedule(equipment, "B"), at=T0, name="B2")
    updated = replace_schedule(equipment, "B", renamed)

    assert [schedule.name for schedule in updated.cleaning_schedules] == ["A", "B2", "C"]
    clash = revise_schedule(find_schedule(equipment, "B"), at=T0, name="C")
    with pytest.raises(ValidationError, match="already exists"):
        replace_schedule(equipment, "B", clash)


def test_remove_schedule() -> None:
    equipment = add_schedule(_equipment(), create_schedule(name="Floor", frequency="daily", created_at=T0))

    assert remove_schedule(equipment, "Floor").cleaning_schedules == ()
    with pytest.raises(NotFoundError):
        remove_schedule(equipment, "Walls")
