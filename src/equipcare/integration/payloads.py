"""Document-store payload contracts.

Maintenance history is exported from the document store as camelCase JSON.
This module normalizes those payloads into strict ``MaintenanceRecord``
values and serializes records and incidents back into JSON-safe mappings.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from enum import StrEnum
from math import isfinite
from typing import Any, TypeVar

from equipcare.domain.errors import ValidationError
from equipcare.domain.models import EquipmentStatus, MaintenanceRecord, RecordType, UserRef
from equipcare.history.incidents import Incident

_EnumT = TypeVar("_EnumT", bound=StrEnum)


def normalize_record_payload(
    payload: Mapping[str, object],
    *,
    equipment_id: str | None = None,
) -> MaintenanceRecord:
    """Normalize one maintenance-history document into a record."""
    resolved_equipment_id = _text_or_none(_pick(payload, "equipmentId", "equipment_id", "equipment"))
    if resolved_equipment_id is None:
        resolved_equipment_id = equipment_id.strip() if equipment_id else None
    if not resolved_equipment_id:
        raise ValidationError("equipment_id is required for record normalization")

    return MaintenanceRecord(
        record_id=_object_id(_pick(payload, "_id", "id", "recordId", "record_id")),
        equipment_id=resolved_equipment_id,
        date=parse_timestamp(_pick(payload, "date", "timestamp", "createdAt"), field_name="date"),
        type=_optional_enum(RecordType, _pick(payload, "type"), field_name="type"),
        notes=_text_or_none(_pick(payload, "notes")) or "",
        performed_by=_user_ref(_pick(payload, "performedBy", "performed_by")),
        previous_status=_optional_enum(
            EquipmentStatus,
            _pick(payload, "previousStatus", "previous_status"),
            field_name="previousStatus",
        ),
        new_status=_optional_enum(
            EquipmentStatus,
            _pick(payload, "newStatus", "new_status"),
            field_name="newStatus",
        ),
        associated_with_current_issue=bool(
            _pick(payload, "associatedWithCurrentIssue", "associated_with_current_issue") or False
        ),
    )


def normalize_record_batch(
    payloads: Sequence[Mapping[str, object]],
    *,
    equipment_id: str | None = None,
) -> tuple[MaintenanceRecord, ...]:
    """Normalize a history export, preserving its order."""
    return tuple(normalize_record_payload(payload, equipment_id=equipment_id) for payload in payloads)


def record_to_payload(record: MaintenanceRecord) -> dict[str, Any]:
    """Serialize a record using the document store's field names."""
    return {
        "_id": record.record_id,
        "equipmentId": record.equipment_id,
        "date": record.date.isoformat(),
        "type": record.type.value if record.type is not None else None,
        "notes": record.notes,
        "performedBy": (
            {"_id": record.performed_by.user_id, "name": record.performed_by.display_name}
            if record.performed_by is not None
            else None
        ),
        "previousStatus": record.previous_status.value if record.previous_status is not None else None,
        "newStatus": record.new_status.value if record.new_status is not None else None,
        "associatedWithCurrentIssue": record.associated_with_current_issue,
    }


def incident_to_jsonable(incident: Incident) -> dict[str, Any]:
    """Serialize an incident with its parsed severity, repair details and timeline."""
    repair = incident.repair
    return {
        "key": incident.key,
        "isResolved": incident.is_resolved,
        "openedAt": incident.opened_at.isoformat(),
        "severity": incident.severity.value,
        "issue": incident.issue_description,
        "synthesizedOpen": incident.synthesized_open,
        "repair": (
            {"notes": repair.notes, "cost": repair.cost, "repairedBy": repair.repaired_by}
            if repair is not None
            else None
        ),
        "timeline": [
            {"kind": entry.kind.value, "record": record_to_payload(entry.record)}
            for entry in incident.timeline
        ],
    }


def _pick(payload: Mapping[str, object], *keys: str) -> object | None:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _text_or_none(raw: object | None) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        value = raw.strip()
        return value or None
    return str(raw).strip() or None


def _object_id(raw: object | None) -> str | None:
    if isinstance(raw, Mapping):
        return _text_or_none(_pick(raw, "$oid"))
    return _text_or_none(raw)


def _user_ref(raw: object | None) -> UserRef | None:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        user_id = _object_id(_pick(raw, "_id", "id", "userId"))
        if user_id is None:
            raise ValidationError("performedBy must carry an id")
        return UserRef(user_id=user_id, display_name=_text_or_none(_pick(raw, "name", "displayName")) or "")
    user_id = _text_or_none(raw)
    if user_id is None:
        return None
    return UserRef(user_id=user_id)


def _optional_enum(enum_type: type[_EnumT], raw: object | None, *, field_name: str) -> _EnumT | None:
    value = _text_or_none(raw)
    if value is None:
        return None
    try:
        return enum_type(value.lower())
    except ValueError as exc:
        raise ValidationError(f"{field_name} has unknown value: {value!r}") from exc


def parse_timestamp(raw: object | None, *, field_name: str) -> datetime:
    """Accept ISO-8601 text, epoch seconds/milliseconds or ``{"$date": ...}``; naive values are UTC."""
    if isinstance(raw, Mapping):
        raw = _pick(raw, "$date")
    if raw is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(raw, datetime):
        return raw if raw.tzinfo is not None else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, bool):
        raise ValidationError(f"{field_name} must be a timestamp")

    if isinstance(raw, (int, float)):
        numeric = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError(f"{field_name} is required")
        try:
            numeric = float(text)
        except ValueError:
            return _parse_iso8601(text, field_name=field_name)
    else:
        raise ValidationError(f"{field_name} must be a timestamp")

    if not isfinite(numeric) or numeric <= 0:
        raise ValidationError(f"{field_name} must be a positive finite timestamp")

    # Heuristic: values below 1e11 are treated as epoch seconds.
    # Current epoch milliseconds are already above this threshold.
    seconds = numeric if numeric < 100_000_000_000 else numeric / 1000.0
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _parse_iso8601(value: str, *, field_name: str) -> datetime:
    normalized = value
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValidationError(f"{field_name} is not an ISO-8601 timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
