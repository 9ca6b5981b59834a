"""Alert persistence and multi-channel delivery."""

from dataclasses import dataclass, field
from datetime import datetime

from talentwatch.config.settings import get_settings
from talentwatch.core.audit import AuditAction, AuditLog
from talentwatch.core.exceptions import DeliveryError, NotFoundError
from talentwatch.core.logging import get_logger
from talentwatch.notifications.channels import DeliveryChannel, DeliveryResult, default_channels
from talentwatch.notifications.types import Alert, AlertType, ChannelType, DeliveryConfig
from talentwatch.scoring.types import Priority
from talentwatch.storage.base import BlobStore
from talentwatch.storage.repository import KeyedRepository, SingletonDocument

logger = get_logger(__name__)

NOTIFICATION_ACTOR = "notification_system"


@dataclass
class DispatchOutcome:
    """Stored alert plus per-channel results."""

    alert: Alert
    results: list[DeliveryResult] = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        return self.alert.delivered


class AlertDispatcher:
    """Stores alerts and delivers them through enabled channels.

    The alert is persisted before any channel is attempted, so a delivery
    failure never loses it. Channels are attempted independently.
    """

    def __init__(
        self,
        store: BlobStore,
        audit_log: AuditLog,
        channels: dict[ChannelType, DeliveryChannel] | None = None,
        max_alerts: int | None = None,
    ):
        """Initialize the dispatcher.

        Args:
            store: Blob store for alerts and channel settings
            audit_log: Audit trail for delivery attempts
            channels: Channel implementations (built-ins when omitted)
            max_alerts: Alert retention cap (default from settings)
        """
        cap = max_alerts or get_settings().retention.alert_max_entries
        self._alerts = KeyedRepository(store, "alerts", Alert, max_entries=cap)
        self._config = SingletonDocument(store, "alerts:delivery_config", DeliveryConfig, DeliveryConfig)
        self._channels = channels if channels is not None else default_channels()
        self._audit = audit_log

    # -------------------------------------------------------------------------
    # Channel configuration
    # -------------------------------------------------------------------------

    async def configure_channels(self, config: DeliveryConfig) -> None:
        await self._config.save(config)
        logger.info("delivery_channels_configured", enabled=[c.value for c in config.enabled_channels()])

    async def get_delivery_config(self) -> DeliveryConfig:
        return await self._config.load()

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    async def dispatch(self, alert: Alert) -> DispatchOutcome:
        """Persist an alert and attempt every enabled channel.

        The alert is marked delivered when at least one channel succeeds.
        Each attempt is audited with its success flag.
        """
        await self._alerts.upsert(alert)
        config = await self._config.load()
        outcome = DispatchOutcome(alert=alert)

        for channel_type in config.enabled_channels():
            result = await self._attempt(alert, channel_type, config.channels[channel_type].options)
            outcome.results.append(result)

        if any(r.success for r in outcome.results):
            updated = await self._alerts.update(alert.id, lambda a: a.model_copy(update={"delivered": True}))
            outcome.alert = updated or alert.model_copy(update={"delivered": True})

        logger.info(
            "alert_dispatched",
            alert_id=alert.id,
            alert_type=alert.type.value,
            channels=len(outcome.results),
            delivered=outcome.alert.delivered,
        )
        return outcome

    async def deliver(self, alert: Alert) -> bool:
        """Persist and deliver an alert. Returns whether any channel succeeded."""
        outcome = await self.dispatch(alert)
        return outcome.delivered

    async def _attempt(self, alert: Alert, channel_type: ChannelType, options: dict) -> DeliveryResult:
        channel = self._channels.get(channel_type)
        purpose = f"{channel_type.value.capitalize()} notification delivery"
        if channel is None:
            result = DeliveryResult(channel_type=channel_type, success=False, error="No channel registered")
        else:
            purpose = channel.audit_purpose
            try:
                await channel.send(alert, options)
                result = DeliveryResult(channel_type=channel_type, success=True)
            except DeliveryError as e:
                logger.warning(
                    "alert_delivery_failed", alert_id=alert.id, channel=channel_type.value, error=e.message
                )
                result = DeliveryResult(channel_type=channel_type, success=False, error=e.message)

        await self._audit.log_event(
            action=AuditAction.ACCESS,
            actor_id=NOTIFICATION_ACTOR,
            subject_ids=[alert.subject_id],
            data_types=["notification"],
            purpose=purpose,
            success=result.success,
            details=result.error,
        )
        return result

    # -------------------------------------------------------------------------
    # Queries and state changes
    # -------------------------------------------------------------------------

    async def get(self, alert_id: str) -> Alert | None:
        return await self._alerts.get(alert_id)

    async def query(
        self,
        alert_type: AlertType | None = None,
        priority: Priority | None = None,
        unread_only: bool = False,
        recipient_id: str | None = None,
        include_archived: bool = True,
        limit: int = 100,
    ) -> list[Alert]:
        """Query alerts, newest first.

        Args:
            alert_type: Only alerts of this type
            priority: Only alerts of this priority
            unread_only: Only alerts ``recipient_id`` has not read
            recipient_id: Only alerts addressed to this recipient
            include_archived: Include archived alerts
            limit: Maximum alerts returned
        """
        alerts = await self._alerts.list_all()
        if alert_type is not None:
            alerts = [a for a in alerts if a.type == alert_type]
        if priority is not None:
            alerts = [a for a in alerts if a.priority == priority]
        if recipient_id is not None:
            alerts = [a for a in alerts if recipient_id in a.recipients]
            if unread_only:
                alerts = [a for a in alerts if not a.is_read_by(recipient_id)]
        if not include_archived:
            alerts = [a for a in alerts if not a.archived]

        alerts.reverse()
        alerts.sort(key=lambda a: a.timestamp, reverse=True)
        return alerts[:limit]

    async def list_in_window(self, start: datetime, end: datetime) -> list[Alert]:
        """Alerts with ``start <= timestamp < end``, oldest first."""
        return [a for a in await self._alerts.list_all() if start <= a.timestamp < end]

    async def mark_read(self, alert_id: str, user_id: str) -> Alert:
        """Record that ``user_id`` read an alert. Idempotent.

        Raises:
            NotFoundError: If the alert does not exist
        """

        def add_reader(alert: Alert) -> Alert:
            if alert.is_read_by(user_id):
                return alert
            return alert.model_copy(update={"read_by": [*alert.read_by, user_id]})

        updated = await self._alerts.update(alert_id, add_reader)
        if updated is None:
            raise NotFoundError("alert", alert_id)
        return updated

    async def archive(self, alert_id: str) -> Alert:
        """Archive an alert.

        Raises:
            NotFoundError: If the alert does not exist
        """
        updated = await self._alerts.update(alert_id, lambda a: a.model_copy(update={"archived": True}))
        if updated is None:
            raise NotFoundError("alert", alert_id)
        return updated
