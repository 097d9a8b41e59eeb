"""Equipment aggregate: the only mutation surface of the lifecycle core.

Each mutating operation loads the current equipment, runs one pure component,
and commits the new state together with its records in a single atomic write.
Writes to the same equipment id are serialized; reads recompute from the
committed log without locking.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

from equipcare.cleaning.checklist import coerce_completed_items, require_checklist_complete
from equipcare.cleaning.recurrence import (
    DEFAULT_RECURRENCE_POLICY,
    RecurrencePolicy,
    compute_next_due,
    is_overdue,
    record_completion,
)
from equipcare.cleaning.schedules import (
    add_schedule,
    create_schedule,
    find_schedule,
    remove_schedule,
    replace_schedule,
    revise_schedule,
)
from equipcare.domain.catalog import EquipmentCatalog
from equipcare.domain.models import (
    ChecklistItem,
    CleaningFrequency,
    CleaningSchedule,
    CompletedItem,
    Equipment,
    EquipmentStatus,
    MaintenanceRecord,
    Severity,
    UpdateTag,
    UserRef,
)
from equipcare.history.incidents import Incident, reconstruct_incidents
from equipcare.integration.notifications import (
    EquipmentNotification,
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    deliver,
)
from equipcare.lifecycle import status_machine
from equipcare.lifecycle.notes import parse_severity, strip_severity
from equipcare.lifecycle.status_machine import Transition
from equipcare.storage.contracts import EquipmentRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_record_id() -> str:
    return uuid.uuid4().hex


class EquipmentAggregate:
    """Facade over status machine, event log, reconstructor and scheduler."""

    def __init__(
        self,
        repository: EquipmentRepository,
        *,
        notifier: NotificationSink | None = None,
        recurrence_policy: RecurrencePolicy = DEFAULT_RECURRENCE_POLICY,
        catalog: EquipmentCatalog | None = None,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_record_id,
    ) -> None:
        self._repository = repository
        self._notifier: NotificationSink = notifier if notifier is not None else LoggingNotificationSink()
        self._policy = recurrence_policy
        self._catalog = catalog if catalog is not None else EquipmentCatalog()
        self._clock = clock
        self._id_factory = id_factory
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def catalog(self) -> EquipmentCatalog:
        return self._catalog

    # -- reads -------------------------------------------------------------

    def get_equipment(self, equipment_id: str) -> Equipment:
        return self._repository.load_equipment(equipment_id)

    def get_incidents(self, equipment_id: str) -> tuple[Incident, ...]:
        """Incidents rebuilt from the committed log, most recently opened first."""
        self._repository.load_equipment(equipment_id)
        return reconstruct_incidents(self._repository.list_records(equipment_id))

    def preview_next_due(
        self,
        equipment_id: str,
        schedule_name: str,
        *,
        is_early: bool = False,
        completion_date: datetime | None = None,
    ) -> datetime:
        """Next due date a completion would produce, without recording it."""
        schedule = find_schedule(self._repository.load_equipment(equipment_id), schedule_name)
        at = completion_date if completion_date is not None else self._clock()
        return compute_next_due(schedule, at, is_early, policy=self._policy)

    def overdue_cleaning_schedules(
        self,
        equipment_id: str,
        *,
        now: datetime | None = None,
    ) -> tuple[CleaningSchedule, ...]:
        at = now if now is not None else self._clock()
        equipment = self._repository.load_equipment(equipment_id)
        return tuple(schedule for schedule in equipment.cleaning_schedules if is_overdue(schedule, at))

    # -- equipment lifecycle -------------------------------------------------

    def register_equipment(
        self,
        equipment_id: str,
        *,
        name: str | None = None,
        category: str | None = None,
        maintenance_interval_days: int | None = None,
    ) -> Equipment:
        """Create operational equipment from the catalog or explicit fields."""
        if name is None or category is None or maintenance_interval_days is None:
            definition = self._catalog.find(equipment_id)
            name = name if name is not None else definition.name
            category = category if category is not None else definition.category
            if maintenance_interval_days is None:
                maintenance_interval_days = definition.maintenance_interval_days

        at = self._clock()
        equipment = Equipment(
            equipment_id=equipment_id,
            name=name,
            category=category,
            maintenance_interval_days=maintenance_interval_days,
            status=EquipmentStatus.OPERATIONAL,
            last_maintenance=at,
            next_maintenance=at + timedelta(days=maintenance_interval_days),
        )
        stored = self._repository.add_equipment(equipment)
        logger.info("registered equipment %s (%s)", equipment_id, category)
        return stored

    def mark_broken(
        self,
        equipment_id: str,
        *,
        description: str,
        severity: Severity | str | None = Severity.MEDIUM,
        performed_by: UserRef | None = None,
    ) -> Transition:
        transition = self._apply(
            equipment_id,
            "mark_broken",
            lambda equipment, at, record_id: status_machine.mark_broken(
                equipment,
                description=description,
                severity=severity,
                at=at,
                performed_by=performed_by,
                record_id=record_id,
            ),
        )
        issue = transition.equipment.issues[-1]
        deliver(
            self._notifier,
            EquipmentNotification(
                kind=NotificationKind.EQUIPMENT_BROKEN,
                equipment_id=equipment_id,
                equipment_name=transition.equipment.name,
                message=strip_severity(issue),
                occurred_at=transition.record.date,
                severity=parse_severity(issue),
                performed_by=performed_by,
            ),
        )
        return transition

    def resolve_issue(
        self,
        equipment_id: str,
        *,
        notes: str,
        cost: float | None = None,
        repaired_by: str | None = None,
        performed_by: UserRef | None = None,
    ) -> Transition:
        return self._apply(
            equipment_id,
            "resolve_issue",
            lambda equipment, at, record_id: status_machine.resolve_issue(
                equipment,
                notes=notes,
                cost=cost,
                repaired_by=repaired_by,
                at=at,
                performed_by=performed_by,
                record_id=record_id,
            ),
        )

    def add_update(
        self,
        equipment_id: str,
        *,
        notes: str,
        tag: UpdateTag | str | None = None,
        performed_by: UserRef | None = None,
    ) -> Transition:
        return self._apply(
            equipment_id,
            "add_update",
            lambda equipment, at, record_id: status_machine.add_update(
                equipment,
                notes=notes,
                tag=tag,
                at=at,
                performed_by=performed_by,
                record_id=record_id,
            ),
        )

    def add_note(
        self,
        equipment_id: str,
        *,
        notes: str,
        performed_by: UserRef | None = None,
    ) -> Transition:
        return self._apply(
            equipment_id,
            "add_note",
            lambda equipment, at, record_id: status_machine.add_note(
                equipment,
                notes=notes,
                at=at,
                performed_by=performed_by,
                record_id=record_id,
            ),
        )

    def complete_maintenance(
        self,
        equipment_id: str,
        *,
        notes: str | None = None,
        performed_by: UserRef | None = None,
    ) -> Transition:
        return self._apply(
            equipment_id,
            "complete_maintenance",
            lambda equipment, at, record_id: status_machine.complete_maintenance(
                equipment,
                notes=notes,
                at=at,
                performed_by=performed_by,
                record_id=record_id,
            ),
        )

    def delete_record(self, equipment_id: str, record_key: str) -> MaintenanceRecord:
        """Operator hard-delete of one log entry; status is left untouched."""
        with self._lock_for(equipment_id):
            removed = self._repository.delete_record(equipment_id, record_key)
        logger.info("deleted maintenance record %s from %s", record_key, equipment_id)
        return removed

    # -- cleaning schedules --------------------------------------------------

    def add_cleaning_schedule(
        self,
        equipment_id: str,
        *,
        name: str,
        frequency: CleaningFrequency | str,
        description: str = "",
        checklist: Iterable[ChecklistItem | dict[str, object]] = (),
    ) -> CleaningSchedule:
        def edit(equipment: Equipment, at: datetime) -> tuple[Equipment, str]:
            schedule = create_schedule(
                name=name,
                frequency=frequency,
                created_at=at,
                description=description,
                checklist=checklist,
                policy=self._policy,
            )
            return add_schedule(equipment, schedule), schedule.name

        return self._edit_schedules(equipment_id, "add_cleaning_schedule", edit)

    def update_cleaning_schedule(
        self,
        equipment_id: str,
        schedule_name: str,
        *,
        new_name: str | None = None,
        frequency: CleaningFrequency | str | None = None,
        description: str | None = None,
        checklist: Iterable[ChecklistItem | dict[str, object]] | None = None,
    ) -> CleaningSchedule:
        def edit(equipment: Equipment, at: datetime) -> tuple[Equipment, str]:
            revised = revise_schedule(
                find_schedule(equipment, schedule_name),
                at=at,
                name=new_name,
                frequency=frequency,
                description=description,
                checklist=checklist,
                policy=self._policy,
            )
            return replace_schedule(equipment, schedule_name, revised), revised.name

        return self._edit_schedules(equipment_id, "update_cleaning_schedule", edit)

    def delete_cleaning_schedule(self, equipment_id: str, schedule_name: str) -> Equipment:
        with self._lock_for(equipment_id):
            current = self._repository.load_equipment(equipment_id)
            updated = remove_schedule(current, schedule_name)
            stored = self._repository.commit(updated, (), expected_version=current.version)
        logger.info("deleted cleaning schedule %r from %s", schedule_name, equipment_id)
        return stored

    def complete_cleaning_schedule(
        self,
        equipment_id: str,
        schedule_name: str,
        *,
        completed_items: Iterable[CompletedItem | dict[str, object]] = (),
        notes: str = "",
        is_early: bool = False,
        performed_by: UserRef | None = None,
    ) -> CleaningSchedule:
        """Record a completion after re-checking the required checklist items."""
        items = coerce_completed_items(completed_items)

        def edit(equipment: Equipment, at: datetime) -> tuple[Equipment, str]:
            schedule = find_schedule(equipment, schedule_name)
            require_checklist_complete(schedule.checklist, items)
            completed = record_completion(
                schedule,
                completion_date=at,
                is_early=is_early,
                performed_by=performed_by,
                notes=notes,
                completed_items=items,
                policy=self._policy,
            )
            return replace_schedule(equipment, schedule_name, completed), completed.name

        return self._edit_schedules(equipment_id, "complete_cleaning_schedule", edit)

    # -- internals -----------------------------------------------------------

    def _apply(
        self,
        equipment_id: str,
        action: str,
        step: Callable[[Equipment, datetime, str], Transition],
    ) -> Transition:
        with self._lock_for(equipment_id):
            current = self._repository.load_equipment(equipment_id)
            transition = step(current, self._clock(), self._id_factory())
            stored = self._repository.commit(
                transition.equipment,
                transition.records,
                expected_version=current.version,
            )
        logger.info(
            "%s committed for %s: %s -> %s",
            action,
            equipment_id,
            current.status.value,
            stored.status.value,
        )
        return Transition(equipment=stored, records=transition.records)

    def _edit_schedules(
        self,
        equipment_id: str,
        action: str,
        edit: Callable[[Equipment, datetime], tuple[Equipment, str]],
    ) -> CleaningSchedule:
        with self._lock_for(equipment_id):
            current = self._repository.load_equipment(equipment_id)
            updated, schedule_name = edit(current, self._clock())
            schedule = find_schedule(updated, schedule_name)
            self._repository.commit(updated, (), expected_version=current.version)
        logger.info("%s committed for %s: %r due %s", action, equipment_id, schedule_name, schedule.next_due.isoformat())
        return schedule

    def _lock_for(self, equipment_id: str) -> threading.Lock:
        """Per-equipment write lock, created only for equipment that exists."""
        self._repository.load_equipment(equipment_id)
        with self._locks_guard:
            lock = self._locks.get(equipment_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[equipment_id] = lock
            return lock
