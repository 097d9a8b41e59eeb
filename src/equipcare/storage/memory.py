"""Thread-safe in-memory implementation of the equipment repository."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import replace

from equipcare.domain.errors import ConcurrencyConflictError, NotFoundError, ValidationError
from equipcare.domain.models import Equipment, MaintenanceRecord
from equipcare.lifecycle.event_log import EventLog

logger = logging.getLogger(__name__)


class InMemoryEquipmentStore:
    """Equipment snapshots plus an ``EventLog``, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._equipment: dict[str, Equipment] = {}
        self._log = EventLog()

    def add_equipment(self, equipment: Equipment) -> Equipment:
        with self._lock:
            if equipment.equipment_id in self._equipment:
                raise ValidationError(f"equipment already exists: {equipment.equipment_id}")
            stored = replace(equipment, version=0)
            self._equipment[equipment.equipment_id] = stored
            return stored

    def load_equipment(self, equipment_id: str) -> Equipment:
        with self._lock:
            equipment = self._equipment.get(equipment_id)
        if equipment is None:
            raise NotFoundError(f"equipment not found: {equipment_id}")
        return equipment

    def save_equipment(self, equipment: Equipment, *, expected_version: int | None = None) -> Equipment:
        with self._lock:
            current = self._current(equipment.equipment_id)
            self._check_version(current, expected_version)
            stored = replace(equipment, version=current.version + 1)
            self._equipment[equipment.equipment_id] = stored
            return stored

    def append_record(self, equipment_id: str, record: MaintenanceRecord) -> None:
        if record.equipment_id != equipment_id:
            raise ValidationError(
                f"record belongs to {record.equipment_id}, not {equipment_id}"
            )
        with self._lock:
            self._current(equipment_id)
            self._log.append(record)

    def list_records(self, equipment_id: str) -> tuple[MaintenanceRecord, ...]:
        with self._lock:
            return self._log.list_for(equipment_id)

    def delete_record(self, equipment_id: str, record_key: str) -> MaintenanceRecord:
        with self._lock:
            self._current(equipment_id)
            return self._log.delete_one(equipment_id, record_key)

    def commit(
        self,
        equipment: Equipment,
        records: Sequence[MaintenanceRecord],
        *,
        expected_version: int,
    ) -> Equipment:
        """Save equipment and append records together, or do neither."""
        foreign = [record for record in records if record.equipment_id != equipment.equipment_id]
        if foreign:
            raise ValidationError(f"records must belong to equipment {equipment.equipment_id}")
        with self._lock:
            current = self._current(equipment.equipment_id)
            self._check_version(current, expected_version)
            # extend validates the whole batch before writing
            self._log.extend(records)
            stored = replace(equipment, version=current.version + 1)
            self._equipment[equipment.equipment_id] = stored
            return stored

    def _current(self, equipment_id: str) -> Equipment:
        current = self._equipment.get(equipment_id)
        if current is None:
            raise NotFoundError(f"equipment not found: {equipment_id}")
        return current

    @staticmethod
    def _check_version(current: Equipment, expected_version: int | None) -> None:
        if expected_version is None or current.version == expected_version:
            return
        logger.warning(
            "version conflict on %s: stored=%d expected=%d",
            current.equipment_id,
            current.version,
            expected_version,
        )
        raise ConcurrencyConflictError(
            f"equipment {current.equipment_id} changed concurrently "
            f"(stored version {current.version}, expected {expected_version})"
        )
