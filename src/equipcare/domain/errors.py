"""Error kinds raised by the equipment lifecycle core."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Stable error categories surfaced to callers."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INVALID_TRANSITION = "invalid_transition"
    CONCURRENCY_CONFLICT = "concurrency_conflict"


class EquipCareError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION


class NotFoundError(EquipCareError, LookupError):
    """Equipment, schedule or record does not exist."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(EquipCareError, ValueError):
    """Caller input failed a domain rule."""

    kind = ErrorKind.VALIDATION


class InvalidTransitionError(EquipCareError):
    """Requested status change is not allowed from the current status."""

    kind = ErrorKind.INVALID_TRANSITION


class ConcurrencyConflictError(EquipCareError):
    """Stored version no longer matches the version a write was based on."""

    kind = ErrorKind.CONCURRENCY_CONFLICT
