"""Notification rules, alerts and delivery channels."""

from talentwatch.notifications.channels import (
    DashboardChannel,
    DeliveryChannel,
    DeliveryResult,
    EmailChannel,
    MessageChannel,
    PushChannel,
    SMSChannel,
    default_channels,
)
from talentwatch.notifications.dispatcher import AlertDispatcher, DispatchOutcome
from talentwatch.notifications.rules import (
    ELITE_THRESHOLD,
    NotificationRuleEngine,
    RuleStore,
    default_rules,
    improvement_priority,
    matches_conditions,
)
from talentwatch.notifications.types import (
    Alert,
    AlertPayload,
    AlertType,
    ChannelSettings,
    ChannelType,
    DeliveryConfig,
    NotificationRule,
    RuleConditions,
    RuleFrequency,
    RuleRecipients,
)

__all__ = [
    # Types
    "Alert",
    "AlertPayload",
    "AlertType",
    "ChannelSettings",
    "ChannelType",
    "DeliveryConfig",
    "NotificationRule",
    "RuleConditions",
    "RuleFrequency",
    "RuleRecipients",
    # Channels
    "DashboardChannel",
    "DeliveryChannel",
    "DeliveryResult",
    "EmailChannel",
    "MessageChannel",
    "PushChannel",
    "SMSChannel",
    "default_channels",
    # Dispatch
    "AlertDispatcher",
    "DispatchOutcome",
    # Rules
    "ELITE_THRESHOLD",
    "NotificationRuleEngine",
    "RuleStore",
    "default_rules",
    "improvement_priority",
    "matches_conditions",
]
