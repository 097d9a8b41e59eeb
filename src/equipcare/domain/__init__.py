"""Domain models, error kinds and equipment catalog."""

from equipcare.domain.catalog import DEFAULT_EQUIPMENT, EquipmentCatalog, EquipmentDefinition
from equipcare.domain.errors import (
    ConcurrencyConflictError,
    EquipCareError,
    ErrorKind,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from equipcare.domain.models import (
    ChecklistItem,
    CleaningCompletion,
    CleaningFrequency,
    CleaningSchedule,
    CompletedItem,
    Equipment,
    EquipmentStatus,
    MaintenanceRecord,
    RecordType,
    Severity,
    UpdateTag,
    UserRef,
)

__all__ = [
    "DEFAULT_EQUIPMENT",
    "ChecklistItem",
    "CleaningCompletion",
    "CleaningFrequency",
    "CleaningSchedule",
    "CompletedItem",
    "ConcurrencyConflictError",
    "EquipCareError",
    "Equipment",
    "EquipmentCatalog",
    "EquipmentDefinition",
    "EquipmentStatus",
    "ErrorKind",
    "InvalidTransitionError",
    "MaintenanceRecord",
    "NotFoundError",
    "RecordType",
    "Severity",
    "UpdateTag",
    "UserRef",
    "ValidationError",
]
