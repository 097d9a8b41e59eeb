"""Adapters for document-store payloads and outbound notifications."""

from equipcare.integration.notifications import (
    EquipmentNotification,
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    deliver,
)
from equipcare.integration.payloads import (
    incident_to_jsonable,
    normalize_record_batch,
    normalize_record_payload,
    parse_timestamp,
    record_to_payload,
)

__all__ = [
    "EquipmentNotification",
    "LoggingNotificationSink",
    "NotificationKind",
    "NotificationSink",
    "deliver",
    "incident_to_jsonable",
    "normalize_record_batch",
    "normalize_record_payload",
    "parse_timestamp",
    "record_to_payload",
]
