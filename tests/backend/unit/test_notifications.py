"""
Unit tests for core.notifications.
Tests sink selection and best-effort delivery.
"""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

from synqit.core.notifications import (
    LoggingNotificationSink,
    NullNotificationSink,
    OutboundNotification,
    deliver_quietly,
    get_notification_sink,
)


def _notification(event: str = "partnership_request") -> OutboundNotification:
    return OutboundNotification(
        recipient_email="owner@example.com",
        subject="New Partnership Request",
        body="Alpha wants to partner with Beta",
        event=event,
    )


class TestSinkSelection:

    def test_enabled_returns_logging_sink(self):
        sink = get_notification_sink(True)
        assert isinstance(sink, LoggingNotificationSink)
        assert sink.name == "log"

    def test_disabled_returns_null_sink(self):
        sink = get_notification_sink(False)
        assert isinstance(sink, NullNotificationSink)
        assert sink.name == "disabled"


class TestDelivery:

    def test_logging_sink_logs_summary(self, caplog):
        sink = LoggingNotificationSink()
        with caplog.at_level(logging.INFO, logger="uvicorn.error"):
            assert asyncio.run(deliver_quietly(sink, _notification())) is True
        assert "partnership_request -> owner@example.com" in caplog.text

    def test_logging_sink_keeps_nothing(self, caplog):
        """One-time tokens in the context are neither retained nor logged."""
        sink = get_notification_sink(True)
        with caplog.at_level(logging.INFO, logger="uvicorn.error"):
            for i in range(50):
                notification = _notification("password_reset")
                notification.context = {"token": f"raw-reset-token-{i}"}
                asyncio.run(sink.deliver(notification))

        assert vars(sink) == {}
        assert "raw-reset-token" not in caplog.text
        assert caplog.text.count("password_reset") == 50

    def test_null_sink_accepts_and_drops(self):
        assert asyncio.run(deliver_quietly(NullNotificationSink(), _notification())) is True

    def test_no_sink_configured(self):
        assert asyncio.run(deliver_quietly(None, _notification())) is False

    def test_failing_sink_does_not_raise(self):
        """Transport errors are logged and reported as a False return."""
        sink = MagicMock()
        sink.name = "smtp"
        sink.deliver = AsyncMock(side_effect=ConnectionError("smtp down"))

        notification = _notification("password_reset")
        assert asyncio.run(deliver_quietly(sink, notification)) is False
        sink.deliver.assert_awaited_once_with(notification)
