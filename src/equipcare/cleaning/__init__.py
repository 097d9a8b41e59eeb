"""Cleaning schedule recurrence, checklist gating and schedule edits."""

from equipcare.cleaning.checklist import (
    ChecklistEvaluation,
    can_complete,
    coerce_completed_items,
    evaluate_checklist,
    require_checklist_complete,
    validate_checklist_items,
)
from equipcare.cleaning.recurrence import (
    DEFAULT_INTERVAL_DAYS,
    DEFAULT_RECURRENCE_POLICY,
    RecurrencePolicy,
    compute_next_due,
    days_until_due,
    initial_due_date,
    is_overdue,
    parse_frequency,
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

__all__ = [
    "DEFAULT_INTERVAL_DAYS",
    "DEFAULT_RECURRENCE_POLICY",
    "ChecklistEvaluation",
    "RecurrencePolicy",
    "add_schedule",
    "can_complete",
    "coerce_completed_items",
    "compute_next_due",
    "create_schedule",
    "days_until_due",
    "evaluate_checklist",
    "find_schedule",
    "initial_due_date",
    "is_overdue",
    "parse_frequency",
    "record_completion",
    "remove_schedule",
    "replace_schedule",
    "require_checklist_complete",
    "revise_schedule",
    "validate_checklist_items",
]
