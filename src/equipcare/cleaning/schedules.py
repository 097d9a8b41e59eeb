"""Cleaning schedule edits keyed by schedule name."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from equipcare.cleaning.checklist import validate_checklist_items
from equipcare.cleaning.recurrence import DEFAULT_RECURRENCE_POLICY, RecurrencePolicy, initial_due_date, parse_frequency
from equipcare.domain.errors import NotFoundError, ValidationError
from equipcare.domain.models import ChecklistItem, CleaningFrequency, CleaningSchedule, Equipment


def find_schedule(equipment: Equipment, name: str) -> CleaningSchedule:
    schedule = equipment.schedule(name)
    if schedule is None:
        raise NotFoundError(f"cleaning schedule not found on {equipment.equipment_id}: {name}")
    return schedule


def create_schedule(
    *,
    name: str,
    frequency: CleaningFrequency | str,
    created_at: datetime,
    description: str = "",
    checklist: Iterable[ChecklistItem | dict[str, object]] = (),
    policy: RecurrencePolicy = DEFAULT_RECURRENCE_POLICY,
) -> CleaningSchedule:
    """New schedule, first due one interval after creation."""
    resolved = parse_frequency(frequency)
    return CleaningSchedule(
        name=name.strip(),
        frequency=resolved,
        next_due=initial_due_date(resolved, created_at, policy=policy),
        description=description.strip(),
        checklist=validate_checklist_items(checklist),
    )


def revise_schedule(
    schedule: CleaningSchedule,
    *,
    at: datetime,
    name: str | None = None,
    frequency: CleaningFrequency | str | None = None,
    description: str | None = None,
    checklist: Iterable[ChecklistItem | dict[str, object]] | None = None,
    policy: RecurrencePolicy = DEFAULT_RECURRENCE_POLICY,
) -> CleaningSchedule:
    """Apply partial edits. A frequency change re-anchors ``next_due`` at ``at``."""
    updated = schedule
    if name is not None:
        updated = replace(updated, name=name.strip())
    if frequency is not None:
        resolved = parse_frequency(frequency)
        if resolved != schedule.frequency:
            updated = replace(
                updated,
                frequency=resolved,
                next_due=initial_due_date(resolved, at, policy=policy),
            )
    if description is not None:
        updated = replace(updated, description=description.strip())
    if checklist is not None:
        updated = replace(updated, checklist=validate_checklist_items(checklist))
    return updated


def add_schedule(equipment: Equipment, schedule: CleaningSchedule) -> Equipment:
    if equipment.schedule(schedule.name) is not None:
        raise ValidationError(f"a cleaning schedule named {schedule.name!r} already exists")
    return replace(equipment, cleaning_schedules=(*equipment.cleaning_schedules, schedule))


def replace_schedule(equipment: Equipment, name: str, schedule: CleaningSchedule) -> Equipment:
    """Swap the schedule stored under ``name``, keeping its position."""
    find_schedule(equipment, name)
    if schedule.name != name and equipment.schedule(schedule.name) is not None:
        raise ValidationError(f"a cleaning schedule named {schedule.name!r} already exists")
    return replace(
        equipment,
        cleaning_schedules=tuple(
            schedule if existing.name == name else existing for existing in equipment.cleaning_schedules
        ),
    )


def remove_schedule(equipment: Equipment, name: str) -> Equipment:
    find_schedule(equipment, name)
    return replace(
        equipment,
        cleaning_schedules=tuple(
            existing for existing in equipment.cleaning_schedules if existing.name != name
        ),
    )
