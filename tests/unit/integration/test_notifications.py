"""Unit tests for notification delivery."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from equipcare.domain import Severity
from equipcare.integration import EquipmentNotification, LoggingNotificationSink, NotificationKind, deliver


def _notification() -> EquipmentNotification:
    return EquipmentNotification(
        kind=NotificationKind.EQUIPMENT_BROKEN,
        equipment_id="grills",
        equipment_name="Grills",
        message="Flame out",
        occurred_at=datetime(2024, 7, 1, tzinfo=UTC),
        severity=Severity.HIGH,
    )


class _RecordingSink:
    def __init__(self) -> None:
        self.received: list[EquipmentNotification] = []

    def notify(self, notification: EquipmentNotification) -> None:
        self.received.append(notification)


class _FailingSink:
    def notify(self, notification: EquipmentNotification) -> None:
        raise ConnectionError("smtp down")


def test_deliver_hands_notification_to_sink() -> None:
    sink = _RecordingSink()

    assert deliver(sink, _notification())
    assert sink.received == [_notification()]


def test_deliver_logs_and_swallows_sink_failure(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.ERROR, logger="equipcare.integration.notifications"):
        assert not deliver(_FailingSink(), _notification())

    assert "equipment_broken" in caplog.text
    assert "smtp down" in caplog.text


def test_logging_sink_writes_info(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="equipcare.integration.notifications"):
        LoggingNotificationSink().notify(_notification())

    assert "Grills" in caplog.text
    assert "Flame out" in caplog.text
