"""Deterministic status transitions for one piece of equipment.

Every function here is pure: it takes the current ``Equipment`` plus caller
input and returns a ``Transition`` holding the next ``Equipment`` value and the
records that justify it. Nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from equipcare.domain.errors import InvalidTransitionError, ValidationError
from equipcare.domain.models import (
    Equipment,
    EquipmentStatus,
    MaintenanceRecord,
    RecordType,
    Severity,
    UpdateTag,
    UserRef,
)
from equipcare.lifecycle.notes import format_issue, format_repair_notes, format_update_note

DEFAULT_MAINTENANCE_NOTE = "Routine maintenance completed"


@dataclass(frozen=True, slots=True)
class Transition:
    """Next equipment state and the records appended to reach it."""

    equipment: Equipment
    records: tuple[MaintenanceRecord, ...]

    @property
    def record(self) -> MaintenanceRecord:
        """The last (usually only) record produced."""
        return self.records[-1]


def mark_broken(
    equipment: Equipment,
    *,
    description: str,
    at: datetime,
    severity: Severity | str | None = Severity.MEDIUM,
    performed_by: UserRef | None = None,
    record_id: str | None = None,
) -> Transition:
    """operational -> repair, recording a severity-tagged issue."""
    issue = format_issue(severity, description)
    _require_status(equipment, EquipmentStatus.OPERATIONAL, action="mark broken")

    record = MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment.equipment_id,
        date=at,
        notes=issue,
        performed_by=performed_by,
        previous_status=EquipmentStatus.OPERATIONAL,
        new_status=EquipmentStatus.REPAIR,
    )
    updated = replace(
        equipment,
        status=EquipmentStatus.REPAIR,
        issues=(*equipment.issues, issue),
    )
    return Transition(equipment=updated, records=(record,))


def resolve_issue(
    equipment: Equipment,
    *,
    notes: str,
    at: datetime,
    cost: float | None = None,
    repaired_by: str | None = None,
    performed_by: UserRef | None = None,
    record_id: str | None = None,
) -> Transition:
    """repair -> operational; clears issues and restarts the maintenance interval."""
    formatted = format_repair_notes(notes, cost=cost, repaired_by=repaired_by)
    _require_status(equipment, EquipmentStatus.REPAIR, action="resolve")

    record = MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment.equipment_id,
        date=at,
        type=RecordType.REPAIR,
        notes=formatted,
        performed_by=performed_by,
        previous_status=EquipmentStatus.REPAIR,
        new_status=EquipmentStatus.OPERATIONAL,
    )
    updated = replace(
        equipment,
        status=EquipmentStatus.OPERATIONAL,
        issues=(),
        last_maintenance=at,
        next_maintenance=at + timedelta(days=equipment.maintenance_interval_days),
    )
    return Transition(equipment=updated, records=(record,))


def complete_maintenance(
    equipment: Equipment,
    *,
    at: datetime,
    notes: str | None = None,
    performed_by: UserRef | None = None,
    record_id: str | None = None,
) -> Transition:
    """Routine maintenance while operational; status is unchanged."""
    _require_status(equipment, EquipmentStatus.OPERATIONAL, action="complete maintenance")
    text = (notes or "").strip() or DEFAULT_MAINTENANCE_NOTE

    record = MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment.equipment_id,
        date=at,
        type=RecordType.MAINTENANCE,
        notes=text,
        performed_by=performed_by,
    )
    updated = replace(
        equipment,
        last_maintenance=at,
        next_maintenance=at + timedelta(days=equipment.maintenance_interval_days),
    )
    return Transition(equipment=updated, records=(record,))


def add_update(
    equipment: Equipment,
    *,
    notes: str,
    at: datetime,
    tag: UpdateTag | str | None = None,
    performed_by: UserRef | None = None,
    record_id: str | None = None,
) -> Transition:
    """Tagged progress note on the open issue; status is unchanged."""
    text = format_update_note(notes, tag)
    _require_status(equipment, EquipmentStatus.REPAIR, action="add update")

    record = MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment.equipment_id,
        date=at,
        type=RecordType.NOTE,
        notes=text,
        performed_by=performed_by,
        associated_with_current_issue=True,
    )
    return Transition(equipment=equipment, records=(record,))


def add_note(
    equipment: Equipment,
    *,
    notes: str,
    at: datetime,
    performed_by: UserRef | None = None,
    record_id: str | None = None,
) -> Transition:
    """Standalone operator note, allowed in any status."""
    text = notes.strip()
    if not text:
        raise ValidationError("note must not be empty")

    record = MaintenanceRecord(
        record_id=record_id,
        equipment_id=equipment.equipment_id,
        date=at,
        type=RecordType.NOTE,
        notes=text,
        performed_by=performed_by,
        previous_status=equipment.status,
        new_status=equipment.status,
    )
    return Transition(equipment=equipment, records=(record,))


def _require_status(equipment: Equipment, expected: EquipmentStatus, *, action: str) -> None:
    if equipment.status != expected:
        raise InvalidTransitionError(
            f"cannot {action} equipment {equipment.equipment_id}: "
            f"status is {equipment.status.value}, expected {expected.value}"
        )
