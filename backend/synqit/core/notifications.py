# synqit/core/notifications.py
"""
Outbound notification delivery (email and similar channels).

Services never talk to a mail provider directly; they hand an
`OutboundNotification` to whichever `NotificationSink` the application was
started with. Delivery is best effort: callers log and continue on failure.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger("uvicorn.error")


@dataclass
class OutboundNotification:
    """A message addressed to one user"""
    recipient_email: str
    subject: str
    body: str
    event: str  # e.g. "partnership_request", "password_reset"
    context: dict = field(default_factory=dict)


class NotificationSink(ABC):
    """Notification sink abstract base class"""

    @abstractmethod
    async def deliver(self, notification: OutboundNotification) -> None:
        """Deliver one notification; may raise on transport failure"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class NullNotificationSink(NotificationSink):
    """Drops everything. Used when outbound notifications are disabled."""

    async def deliver(self, notification: OutboundNotification) -> None:
        return None

    @property
    def name(self) -> str:
        return "disabled"


class LoggingNotificationSink(NotificationSink):
    """
    Writes a one-line summary of each notification to the application log
    instead of sending it. The body and context (which may carry one-time
    tokens) are not logged and nothing is kept.
    """

    async def deliver(self, notification: OutboundNotification) -> None:
        logger.info(
            "[notify] %s -> %s: %s",
            notification.event, notification.recipient_email, notification.subject,
        )

    @property
    def name(self) -> str:
        return "log"


def get_notification_sink(enabled: bool) -> NotificationSink:
    return LoggingNotificationSink() if enabled else NullNotificationSink()


async def deliver_quietly(sink: Optional[NotificationSink], notification: OutboundNotification) -> bool:
    """Send through the sink, logging instead of raising on failure."""
    if sink is None:
        return False
    try:
        await sink.deliver(notification)
        return True
    except Exception as exc:
        logger.warning(
            "[notify] failed to deliver %s to %s via %s: %s",
            notification.event, notification.recipient_email, sink.name, exc,
        )
        return False
