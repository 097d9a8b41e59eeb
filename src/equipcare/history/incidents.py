"""Reconstruct repair incidents from a flat, insertion-ordered maintenance log.

Records never reference the incident they belong to, so grouping is inferred
in a single pass:

1. An issue-open record (operational -> non-operational) always starts a new
   incident, even while another one is unresolved.
2. A resolution record (non-operational -> operational) closes the open
   incident with the most recent open date not later than the resolution
   (ties go to the incident created last). With no candidate it becomes a
   single-record incident of its own.
3. Every other record, including transitions into ``maintenance`` or
   ``offline``, is attached to the most recently created incident whether or
   not it is resolved. With no incident yet it starts one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from equipcare.domain.models import EquipmentStatus, MaintenanceRecord, Severity
from equipcare.lifecycle.event_log import record_key
from equipcare.lifecycle.notes import RepairDetails, parse_repair_notes, parse_severity, strip_severity

logger = logging.getLogger(__name__)

_PASS_THROUGH_STATUSES = frozenset({EquipmentStatus.MAINTENANCE, EquipmentStatus.OFFLINE})


class TimelineKind(StrEnum):
    """Role of a record inside an incident timeline."""

    OPENED = "opened"
    UPDATE = "update"
    CLOSED = "closed"


_KIND_RANK = {TimelineKind.OPENED: 0, TimelineKind.UPDATE: 1, TimelineKind.CLOSED: 2}


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    """One record placed on an incident's display timeline."""

    kind: TimelineKind
    record: MaintenanceRecord


@dataclass(frozen=True, slots=True)
class Incident:
    """Derived issue -> updates -> resolution grouping. Never persisted."""

    key: str
    open_event: MaintenanceRecord
    update_events: tuple[MaintenanceRecord, ...] = ()
    close_event: MaintenanceRecord | None = None
    synthesized_open: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.close_event is not None

    @property
    def opened_at(self) -> datetime:
        return self.open_event.date

    @property
    def severity(self) -> Severity:
        """Severity tag of the reported issue (medium when untagged)."""
        if self.synthesized_open:
            return Severity.MEDIUM
        return parse_severity(self.open_event.notes)

    @property
    def issue_description(self) -> str:
        if self.synthesized_open:
            return ""
        return strip_severity(self.open_event.notes)

    @property
    def repair(self) -> RepairDetails | None:
        """Parsed resolution note, or ``None`` while unresolved."""
        if self.close_event is None:
            return None
        return parse_repair_notes(self.close_event.notes)

    @property
    def timeline(self) -> tuple[TimelineEntry, ...]:
        """Open, updates and close merged into chronological order."""
        entries: list[TimelineEntry] = []
        if self.synthesized_open:
            if self.open_event is not self.close_event:
                entries.append(TimelineEntry(TimelineKind.UPDATE, self.open_event))
        else:
            entries.append(TimelineEntry(TimelineKind.OPENED, self.open_event))
        entries.extend(TimelineEntry(TimelineKind.UPDATE, record) for record in self.update_events)
        if self.close_event is not None:
            entries.append(TimelineEntry(TimelineKind.CLOSED, self.close_event))

        # equal dates order open < update < close
        return tuple(sorted(entries, key=lambda entry: (entry.record.date, _KIND_RANK[entry.kind])))

    @property
    def latest_record(self) -> MaintenanceRecord:
        return self.timeline[-1].record


@dataclass(slots=True)
class _IncidentDraft:
    key: str
    order: int
    open_event: MaintenanceRecord
    synthesized_open: bool = False
    update_events: list[MaintenanceRecord] = field(default_factory=list)
    close_event: MaintenanceRecord | None = None

    def freeze(self) -> Incident:
        return Incident(
            key=self.key,
            open_event=self.open_event,
            update_events=tuple(sorted(self.update_events, key=lambda record: record.date)),
            close_event=self.close_event,
            synthesized_open=self.synthesized_open,
        )


class _IncidentBuilder:
    """Single-pass accumulator keyed by incident key, in creation order."""

    def __init__(self) -> None:
        self._drafts: dict[str, _IncidentDraft] = {}
        self._creation_order: list[str] = []

    def start(self, record: MaintenanceRecord, *, synthesized: bool = False) -> _IncidentDraft:
        key = self._unique_key(record_key(record))
        draft = _IncidentDraft(
            key=key,
            order=len(self._creation_order),
            open_event=record,
            synthesized_open=synthesized,
        )
        self._drafts[key] = draft
        self._creation_order.append(key)
        return draft

    def close(self, record: MaintenanceRecord) -> None:
        target = self._select_open(record)
        if target is None:
            logger.debug("resolution %s has no open incident; synthesizing one", record_key(record))
            target = self.start(record, synthesized=True)
        target.close_event = record

    def attach(self, record: MaintenanceRecord) -> None:
        if not self._creation_order:
            logger.debug("record %s precedes any incident; synthesizing one", record_key(record))
            self.start(record, synthesized=True)
            return
        self._drafts[self._creation_order[-1]].update_events.append(record)

    def build(self) -> tuple[Incident, ...]:
        ordered = sorted(
            self._drafts.values(),
            key=lambda draft: (draft.open_event.date, draft.order),
            reverse=True,
        )
        return tuple(draft.freeze() for draft in ordered)

    def _select_open(self, resolution: MaintenanceRecord) -> _IncidentDraft | None:
        best: _IncidentDraft | None = None
        for draft in self._drafts.values():
            if draft.close_event is not None:
                continue
            if draft.open_event.date > resolution.date:
                continue
            if best is None or (draft.open_event.date, draft.order) > (best.open_event.date, best.order):
                best = draft
        return best

    def _unique_key(self, base: str) -> str:
        if base not in self._drafts:
            return base
        suffix = 2
        while f"{base}#{suffix}" in self._drafts:
            suffix += 1
        return f"{base}#{suffix}"


def reconstruct_incidents(records: Iterable[MaintenanceRecord]) -> tuple[Incident, ...]:
    """Group one equipment's log into incidents, most recently opened first."""
    builder = _IncidentBuilder()
    for record in records:
        if record.new_status in _PASS_THROUGH_STATUSES:
            builder.attach(record)
        elif record.is_issue_open:
            builder.start(record)
        elif record.is_resolution:
            builder.close(record)
        else:
            builder.attach(record)
    return builder.build()
