"""Incident reconstruction over the maintenance event log."""

from equipcare.history.incidents import Incident, TimelineEntry, TimelineKind, reconstruct_incidents

__all__ = [
    "Incident",
    "TimelineEntry",
    "TimelineKind",
    "reconstruct_incidents",
]
