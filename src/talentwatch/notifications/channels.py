"""Alert delivery channels.

Email, SMS and push channels hand the rendered alert to an optional
transport callable and record what they sent; without a transport they
only record and log. The dashboard channel is satisfied by the alert
being persisted.

Classes:
    DeliveryChannel: Protocol for delivery channels
    DeliveryResult: Outcome of one delivery attempt
    MessageChannel: Shared implementation for outbound message channels
    EmailChannel: Email delivery
    SMSChannel: SMS delivery
    PushChannel: Push notification delivery
    DashboardChannel: In-app dashboard (no-op)
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from talentwatch.core.exceptions import DeliveryError
from talentwatch.core.logging import get_logger
from talentwatch.notifications.types import Alert, ChannelType

logger = get_logger(__name__)

Transport = Callable[[list[str], str, str], Awaitable[None]]


@dataclass
class DeliveryResult:
    """Result of a delivery attempt.

    Attributes:
        channel_type: Channel attempted
        success: Whether delivery succeeded
        error: Error message if failed
        delivered_at: When the attempt completed
    """

    channel_type: ChannelType
    success: bool
    error: str | None = None
    delivered_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel_type": self.channel_type.value,
            "success": self.success,
            "error": self.error,
            "delivered_at": self.delivered_at.isoformat(),
        }


class DeliveryChannel(Protocol):
    """Protocol for delivery channels."""

    @property
    def channel_type(self) -> ChannelType: ...

    @property
    def audit_purpose(self) -> str: ...

    async def send(self, alert: Alert, options: dict[str, Any]) -> None:
        """Deliver an alert.

        Raises:
            DeliveryError: If delivery fails
        """
        ...


class MessageChannel:
    """Outbound message channel with an optional transport."""

    channel_type: ChannelType
    audit_purpose: str

    def __init__(self, transport: Transport | None = None, should_fail: bool = False) -> None:
        self._transport = transport
        self.should_fail = should_fail
        self.sent_messages: list[dict[str, Any]] = []

    def recipients_for(self, alert: Alert, options: dict[str, Any]) -> list[str]:
        return list(options.get("recipients") or alert.recipients)

    def render(self, alert: Alert) -> str:
        return alert.message

    async def send(self, alert: Alert, options: dict[str, Any]) -> None:
        if self.should_fail:
            raise DeliveryError(f"{self.channel_type.value} delivery failed", channel=self.channel_type.value)

        recipients = self.recipients_for(alert, options)
        body = self.render(alert)
        if self._transport is not None:
            try:
                await self._transport(recipients, alert.title, body)
            except DeliveryError:
                raise
            except Exception as e:
                raise DeliveryError(str(e), channel=self.channel_type.value) from e

        self.sent_messages.append(
            {
                "alert_id": alert.id,
                "recipients": recipients,
                "subject": alert.title,
                "body": body,
                "sent_at": datetime.now(UTC),
            }
        )
        logger.info(
            "notification_sent",
            channel=self.channel_type.value,
            alert_id=alert.id,
            recipients=len(recipients),
        )


class EmailChannel(MessageChannel):
    channel_type = ChannelType.EMAIL
    audit_purpose = "Email notification delivery"

    def render(self, alert: Alert) -> str:
        lines = [alert.message]
        if alert.action_items:
            lines.append("")
            lines.append("Action items:")
            lines.extend(f"- {item}" for item in alert.action_items)
        return "\n".join(lines)


class SMSChannel(MessageChannel):
    channel_type = ChannelType.SMS
    audit_purpose = "SMS notification delivery"

    def render(self, alert: Alert) -> str:
        return alert.title


class PushChannel(MessageChannel):
    channel_type = ChannelType.PUSH
    audit_purpose = "Push notification delivery"

    def render(self, alert: Alert) -> str:
        return alert.title


class DashboardChannel:
    """Alerts appear on the dashboard once persisted."""

    channel_type = ChannelType.DASHBOARD
    audit_purpose = "Dashboard notification delivery"

    async def send(self, alert: Alert, options: dict[str, Any]) -> None:
        return None


def default_channels() -> dict[ChannelType, DeliveryChannel]:
    """One instance of every built-in channel."""
    return {
        ChannelType.EMAIL: EmailChannel(),
        ChannelType.SMS: SMSChannel(),
        ChannelType.PUSH: PushChannel(),
        ChannelType.DASHBOARD: DashboardChannel(),
    }
