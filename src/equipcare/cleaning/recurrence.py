"""Next-due computation for recurring cleaning schedules.

Intervals are fixed day counts, so ``monthly`` drifts against the calendar.
An on-time completion advances from the due date that was met; an early
completion re-anchors the cadence at the completion moment. Overdue
schedules advance by exactly one interval with no catch-up.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from math import ceil
from types import MappingProxyType

from equipcare.domain.errors import ValidationError
from equipcare.domain.models import CleaningCompletion, CleaningFrequency, CleaningSchedule, CompletedItem, UserRef

DEFAULT_INTERVAL_DAYS: Mapping[CleaningFrequency, int] = MappingProxyType(
    {
        CleaningFrequency.DAILY: 1,
        CleaningFrequency.WEEKLY: 7,
        CleaningFrequency.BIWEEKLY: 14,
        CleaningFrequency.MONTHLY: 30,
        CleaningFrequency.BIMONTHLY: 60,
        CleaningFrequency.QUARTERLY: 90,
    }
)


@dataclass(frozen=True, slots=True)
class RecurrencePolicy:
    """Frequency-to-interval table used by the scheduler."""

    interval_days: Mapping[CleaningFrequency, int] = field(default_factory=lambda: DEFAULT_INTERVAL_DAYS)

    def __post_init__(self) -> None:
        missing = [frequency.value for frequency in CleaningFrequency if frequency not in self.interval_days]
        if missing:
            raise ValidationError(f"interval_days missing frequencies: {', '.join(missing)}")
        for frequency, days in self.interval_days.items():
            if days <= 0:
                raise ValidationError(f"interval for {frequency} must be > 0 days")
        object.__setattr__(self, "interval_days", MappingProxyType(dict(self.interval_days)))

    def interval(self, frequency: CleaningFrequency) -> timedelta:
        return timedelta(days=self.interval_days[frequency])


DEFAULT_RECURRENCE_POLICY = RecurrencePolicy()


def parse_frequency(raw: CleaningFrequency | str) -> CleaningFrequency:
    """Normalize a frequency token, rejecting unknown values."""
    if isinstance(raw, CleaningFrequency):
        return raw
    token = raw.strip().lower()
    try:
        return CleaningFrequency(token)
    except ValueError as exc:
        allowed = ", ".join(frequency.value for frequency in CleaningFrequency)
        raise ValidationError(f"frequency must be one of {allowed}: {raw!r}") from exc


def initial_due_date(
    frequency: CleaningFrequency,
    created_at: datetime,
    *,
    policy: RecurrencePolicy = DEFAULT_RECURRENCE_POLICY,
) -> datetime:
    """First due date of a newly created schedule: one interval after creation."""
    return created_at + policy.interval(frequency)


def compute_next_due(
    schedule: CleaningSchedule,
    completion_date: datetime,
    is_early: bool,
    *,
    policy: RecurrencePolicy = DEFAULT_RECURRENCE_POLICY,
) -> datetime:
    """Next due date after a completion."""
    anchor = completion_date if is_early else schedule.next_due
    return anchor + policy.interval(schedule.frequency)


def record_completion(
    schedule: CleaningSchedule,
    *,
    completion_date: datetime,
    is_early: bool,
    performed_by: UserRef | None = None,
    notes: str = "",
    completed_items: Iterable[CompletedItem] = (),
    policy: RecurrencePolicy = DEFAULT_RECURRENCE_POLICY,
) -> CleaningSchedule:
    """Append a completion to history and advance ``next_due``."""
    completion = CleaningCompletion(
        date=completion_date,
        performed_by=performed_by,
        notes=notes.strip(),
        completed_items=tuple(completed_items),
        is_early_completion=is_early,
    )
    return replace(
        schedule,
        next_due=compute_next_due(schedule, completion_date, is_early, policy=policy),
        last_completed=completion_date,
        completion_history=(*schedule.completion_history, completion),
    )


def is_overdue(schedule: CleaningSchedule, now: datetime) -> bool:
    return now > schedule.next_due


def days_until_due(schedule: CleaningSchedule, now: datetime) -> int:
    """Whole days until due, rounded up; negative once overdue."""
    return ceil((schedule.next_due - now).total_seconds() / 86_400)
