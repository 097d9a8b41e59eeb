"""Persistence contract consumed by the equipment aggregate."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from equipcare.domain.models import Equipment, MaintenanceRecord


class EquipmentRepository(Protocol):
    """Storage for equipment state and its append-only maintenance log.

    ``commit`` must apply the equipment save and the record appends as one
    atomic unit, and must reject the write with ``ConcurrencyConflictError``
    when the stored version differs from ``expected_version``.
    """

    def add_equipment(self, equipment: Equipment) -> Equipment: ...

    def load_equipment(self, equipment_id: str) -> Equipment: ...

    def save_equipment(self, equipment: Equipment, *, expected_version: int | None = None) -> Equipment: ...

    def append_record(self, equipment_id: str, record: MaintenanceRecord) -> None: ...

    def list_records(self, equipment_id: str) -> tuple[MaintenanceRecord, ...]: ...

    def delete_record(self, equipment_id: str, record_key: str) -> MaintenanceRecord: ...

    def commit(
        self,
        equipment: Equipment,
        records: Sequence[MaintenanceRecord],
        *,
        expected_version: int,
    ) -> Equipment: ...
