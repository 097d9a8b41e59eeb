"""Core domain models for equipment lifecycle tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from equipcare.domain.errors import ValidationError


class EquipmentStatus(StrEnum):
    """Finite set of equipment states."""

    OPERATIONAL = "operational"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    OFFLINE = "offline"


class RecordType(StrEnum):
    """Kinds of maintenance log entries."""

    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    NOTE = "note"


class Severity(StrEnum):
    """Issue priority carried as a bracket tag in issue strings."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UpdateTag(StrEnum):
    """Bracket tags used on mid-incident progress notes."""

    PARTS_ORDERED = "PARTS ORDERED"
    REPAIR_SCHEDULED = "REPAIR SCHEDULED"
    IN_PROGRESS = "IN PROGRESS"
    WAITING_APPROVAL = "WAITING APPROVAL"
    UPDATE = "UPDATE"


class CleaningFrequency(StrEnum):
    """Supported cleaning cadences."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"


@dataclass(frozen=True, slots=True)
class UserRef:
    """Opaque user identity supplied by the authentication subsystem."""

    user_id: str
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.user_id.strip():
            raise ValidationError("user_id must not be empty")


@dataclass(frozen=True, slots=True)
class MaintenanceRecord:
    """Immutable maintenance log event.

    ``type`` is ``None`` for bare status-change events such as the record
    written when equipment is marked broken.
    """

    record_id: str | None
    equipment_id: str
    date: datetime
    type: RecordType | None = None
    notes: str = ""
    performed_by: UserRef | None = None
    previous_status: EquipmentStatus | None = None
    new_status: EquipmentStatus | None = None
    associated_with_current_issue: bool = False

    def __post_init__(self) -> None:
        if not self.equipment_id.strip():
            raise ValidationError("equipment_id must not be empty")
        if self.date.tzinfo is None:
            raise ValidationError("record date must be timezone-aware")

    @property
    def changes_status(self) -> bool:
        """Whether the record carries a status transition."""
        return self.new_status is not None

    @property
    def is_issue_open(self) -> bool:
        """Operational -> non-operational transition."""
        return (
            self.previous_status == EquipmentStatus.OPERATIONAL
            and self.new_status is not None
            and self.new_status != EquipmentStatus.OPERATIONAL
        )

    @property
    def is_resolution(self) -> bool:
        """Non-operational -> operational transition."""
        return (
            self.previous_status != EquipmentStatus.OPERATIONAL
            and self.new_status == EquipmentStatus.OPERATIONAL
        )


@dataclass(frozen=True, slots=True)
class ChecklistItem:
    """One step of a cleaning checklist."""

    name: str
    is_required: bool = False

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValidationError("checklist item name must not be empty")


@dataclass(frozen=True, slots=True)
class CompletedItem:
    """Submitted completion state for one checklist position."""

    name: str
    is_completed: bool = False


@dataclass(frozen=True, slots=True)
class CleaningCompletion:
    """Audit entry appended each time a cleaning task is completed."""

    date: datetime
    performed_by: UserRef | None
    notes: str = ""
    completed_items: tuple[CompletedItem, ...] = ()
    is_early_completion: bool = False


@dataclass(frozen=True, slots=True)
class CleaningSchedule:
    """Recurring cleaning task owned by one piece of equipment."""

    name: str
    frequency: CleaningFrequency
    next_due: datetime
    description: str = ""
    checklist: tuple[ChecklistItem, ...] = ()
    completion_history: tuple[CleaningCompletion, ...] = ()
    last_completed: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValidationError("cleaning schedule name must not be empty")
        if self.next_due.tzinfo is None:
            raise ValidationError("next_due must be timezone-aware")


@dataclass(frozen=True, slots=True)
class Equipment:
    """Current state of one piece of equipment."""

    equipment_id: str
    name: str
    category: str
    maintenance_interval_days: int
    status: EquipmentStatus = EquipmentStatus.OPERATIONAL
    last_maintenance: datetime | None = None
    next_maintenance: datetime | None = None
    issues: tuple[str, ...] = ()
    cleaning_schedules: tuple[CleaningSchedule, ...] = field(default_factory=tuple)
    version: int = 0

    def __post_init__(self) -> None:
        if not self.equipment_id.strip():
            raise ValidationError("equipment_id must not be empty")
        if self.maintenance_interval_days <= 0:
            raise ValidationError("maintenance_interval_days must be > 0")
        if self.version < 0:
            raise ValidationError("version must be >= 0")

    def schedule(self, name: str) -> CleaningSchedule | None:
        """Return the cleaning schedule with this name if present."""
        for schedule in self.cleaning_schedules:
            if schedule.name == name:
                return schedule
        return None

    def needs_maintenance(self, now: datetime) -> bool:
        """Whether routine maintenance is due at ``now``."""
        if self.next_maintenance is None:
            return False
        return now >= self.next_maintenance
