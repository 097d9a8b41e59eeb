"""Status machine, event log and note conventions."""

from equipcare.lifecycle.event_log import EventLog, derive_status, record_key
from equipcare.lifecycle.notes import (
    RepairDetails,
    coerce_severity,
    format_issue,
    format_repair_notes,
    format_update_note,
    parse_repair_notes,
    parse_severity,
    parse_update_tag,
    strip_severity,
)
from equipcare.lifecycle.status_machine import (
    Transition,
    add_note,
    add_update,
    complete_maintenance,
    mark_broken,
    resolve_issue,
)

__all__ = [
    "EventLog",
    "RepairDetails",
    "Transition",
    "add_note",
    "add_update",
    "coerce_severity",
    "complete_maintenance",
    "derive_status",
    "format_issue",
    "format_repair_notes",
    "format_update_note",
    "mark_broken",
    "parse_repair_notes",
    "parse_severity",
    "parse_update_tag",
    "record_key",
    "resolve_issue",
    "strip_severity",
]
