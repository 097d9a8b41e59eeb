"""Append-only, insertion-ordered maintenance log keyed by equipment id."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from equipcare.domain.errors import NotFoundError, ValidationError
from equipcare.domain.models import EquipmentStatus, MaintenanceRecord


def record_key(record: MaintenanceRecord) -> str:
    """Stable identity of a record: its id, else its ISO timestamp."""
    if record.record_id is not None and record.record_id.strip():
        return record.record_id
    return record.date.isoformat()


def derive_status(records: Sequence[MaintenanceRecord]) -> EquipmentStatus:
    """Status implied by the newest status-changing record in insertion order."""
    for record in reversed(records):
        if record.new_status is not None:
            return record.new_status
    return EquipmentStatus.OPERATIONAL


class EventLog:
    """In-memory event log. Records are never edited, only appended or deleted."""

    def __init__(self) -> None:
        self._records: dict[str, list[MaintenanceRecord]] = {}
        self._keys: dict[str, set[str]] = {}

    def append(self, record: MaintenanceRecord) -> None:
        """Append one record after its equipment's existing records."""
        self.extend((record,))

    def extend(self, records: Iterable[MaintenanceRecord]) -> None:
        """Append a batch; nothing is written if any record is rejected."""
        batch = tuple(records)
        staged: dict[str, set[str]] = {}
        for record in batch:
            key = record_key(record)
            known = self._keys.get(record.equipment_id, set())
            seen = staged.setdefault(record.equipment_id, set())
            if key in known or key in seen:
                raise ValidationError(
                    f"duplicate record for equipment {record.equipment_id}: {key}"
                )
            seen.add(key)

        for record in batch:
            self._records.setdefault(record.equipment_id, []).append(record)
            self._keys.setdefault(record.equipment_id, set()).add(record_key(record))

    def list_for(self, equipment_id: str) -> tuple[MaintenanceRecord, ...]:
        """Records for one equipment in the order they were written."""
        return tuple(self._records.get(equipment_id, ()))

    def delete_one(self, equipment_id: str, key: str) -> MaintenanceRecord:
        """Hard-delete one record by id (or ISO date for id-less records)."""
        records = self._records.get(equipment_id, [])
        for index, record in enumerate(records):
            if record_key(record) == key:
                del records[index]
                self._keys[equipment_id].discard(key)
                return record
        raise NotFoundError(f"maintenance record not found for equipment {equipment_id}: {key}")

    def equipment_ids(self) -> tuple[str, ...]:
        """Equipment ids that have at least one record."""
        return tuple(equipment_id for equipment_id, records in self._records.items() if records)
