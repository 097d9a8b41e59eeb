"""Outbound notification hook invoked after committed mutations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Protocol

from equipcare.domain.models import Severity, UserRef

logger = logging.getLogger(__name__)


class NotificationKind(StrEnum):
    """Events the core announces to collaborators."""

    EQUIPMENT_BROKEN = "equipment_broken"


@dataclass(frozen=True, slots=True)
class EquipmentNotification:
    """Payload handed to the notification sink."""

    kind: NotificationKind
    equipment_id: str
    equipment_name: str
    message: str
    occurred_at: datetime
    severity: Severity | None = None
    performed_by: UserRef | None = None


class NotificationSink(Protocol):
    """Collaborator that delivers notifications (e.g. to store directors)."""

    def notify(self, notification: EquipmentNotification) -> None: ...


class LoggingNotificationSink:
    """Default sink that only writes the notification to the log."""

    def notify(self, notification: EquipmentNotification) -> None:
        logger.info(
            "%s: %s (%s) %s",
            notification.kind.value,
            notification.equipment_name or notification.equipment_id,
            notification.severity.value if notification.severity is not None else "-",
            notification.message,
        )


def deliver(sink: NotificationSink, notification: EquipmentNotification) -> bool:
    """Hand a notification to the sink; delivery failures are logged, not raised."""
    try:
        sink.notify(notification)
    except Exception:
        logger.exception(
            "notification %s for %s failed",
            notification.kind.value,
            notification.equipment_id,
        )
        return False
    return True
