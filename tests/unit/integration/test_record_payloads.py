"""Unit tests for document-store payload normalization."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from equipcare.domain import EquipmentStatus, RecordType, UserRef, ValidationError
from equipcare.history import reconstruct_incidents
from equipcare.integration import (
    incident_to_jsonable,
    normalize_record_batch,
    normalize_record_payload,
    parse_timestamp,
    record_to_payload,
)


def test_normalize_mongo_style_document() -> None:
    record = normalize_record_payload(
        {
            "_id": {"$oid": "65a1f0c2"},
            "date": {"$date": "2024-01-08T10:15:00.000Z"},
            "type": None,
            "notes": "[HIGH] Not working",
            "performedBy": {"_id": "u1", "name": "Sam"},
            "previousStatus": "operational",
            "newStatus": "REPAIR",
        },
        equipment_id="slicers",
    )

    assert record.record_id == "65a1f0c2"
    assert record.equipment_id == "slicers"
    assert record.date == datetime(2024, 1, 8, 10, 15, tzinfo=UTC)
    assert record.type is None
    assert record.performed_by == UserRef(user_id="u1", display_name="Sam")
    assert record.new_status == EquipmentStatus.REPAIR
    assert record.is_issue_open


def test_epoch_timestamps_in_seconds_and_milliseconds() -> None:
    seconds = parse_timestamp(1_704_708_900, field_name="date")
    millis = parse_timestamp("1704708900000", field_name="date")

    assert seconds == millis == datetime(2024, 1, 8, 10, 15, tzinfo=UTC)


def test_naive_iso_timestamp_is_treated_as_utc() -> None:
    assert parse_timestamp("2024-01-08T10:15:00", field_name="date") == datetime(2024, 1, 8, 10, 15, tzinfo=UTC)


def test_missing_or_malformed_fields_are_rejected() -> None:
    with pytest.raises(ValidationError, match="equipment_id"):
        normalize_record_payload({"date": "2024-01-08T10:15:00Z"})
    with pytest.raises(ValidationError, match="date is required"):
        normalize_record_payload({"equipmentId": "slicers"})
    with pytest.raises(ValidationError, match="ISO-8601"):
        normalize_record_payload({"equipmentId": "slicers", "date": "yesterday"})
    with pytest.raises(ValidationError, match="newStatus"):
        normalize_record_payload({"equipmentId": "slicers", "date": "2024-01-08T10:15:00Z", "newStatus": "melted"})


def test_record_payload_uses_camel_case_fields() -> None:
    record = normalize_record_payload(
        {
            "id": "r9",
            "equipmentId": "slicers",
            "date": "2024-01-09T08:00:00Z",
            "type": "note",
            "notes": "[UPDATE] waiting",
            "performedBy": "u2",
            "associatedWithCurrentIssue": True,
        }
    )

    payload = record_to_payload(record)

    assert payload["_id"] == "r9"
    assert payload["type"] == RecordType.NOTE.value
    assert payload["performedBy"] == {"_id": "u2", "name": ""}
    assert payload["associatedWithCurrentIssue"] is True
    assert payload["newStatus"] is None
    assert payload["date"] == "2024-01-09T08:00:00+00:00"


def test_incident_serialization() -> None:
    records = normalize_record_batch(
        [
            {
                "_id": "a",
                "date": "2024-01-08T10:00:00Z",
                "notes": "[HIGH] Not working",
                "previousStatus": "operational",
                "newStatus": "repair",
            },
            {
                "_id": "b",
                "date": "2024-01-09T10:00:00Z",
                "type": "repair",
                "notes": "Replaced motor\nCost: $50\nRepaired by: Jim",
                "previousStatus": "repair",
                "newStatus": "operational",
            },
        ],
        equipment_id="slicers",
    )

    document = incident_to_jsonable(reconstruct_incidents(records)[0])

    assert document["key"] == "a"
    assert document["isResolved"] is True
    assert document["severity"] == "high"
    assert document["issue"] == "Not working"
    assert document["repair"] == {"notes": "Replaced motor", "cost": 50.0, "repairedBy": "Jim"}
    assert [entry["kind"] for entry in document["timeline"]] == ["opened", "closed"]
