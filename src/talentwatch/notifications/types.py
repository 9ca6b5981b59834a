"""Type definitions for notification rules, alerts and delivery channels.

Classes:
    AlertType: Kinds of talent alert
    RuleFrequency: How often a rule's recipients want to hear about it
    RuleConditions: Fixed predicate fields of a rule
    RuleRecipients: Who a rule notifies
    NotificationRule: A configured rule
    AlertPayload: Scores and context attached to an alert
    Alert: A persisted talent alert
    ChannelType: Delivery channel kinds
    ChannelSettings: Enablement and options for one channel
    DeliveryConfig: Channel settings keyed by channel type
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from talentwatch.scoring.types import Priority
from talentwatch.utils.ids import new_id


class AlertType(str, Enum):
    NEW_TALENT = "new_talent"
    SCORE_IMPROVEMENT = "score_improvement"
    ELITE_THRESHOLD = "elite_threshold"
    RECRUITMENT_OPPORTUNITY = "recruitment_opportunity"
    ASSESSMENT_MILESTONE = "assessment_milestone"


class RuleFrequency(str, Enum):
    IMMEDIATE = "immediate"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RuleConditions(BaseModel):
    """Conjunctive rule predicates. Unset fields do not constrain."""

    min_score: float | None = Field(default=None, ge=0, le=100)
    max_age: int | None = Field(default=None, ge=0)
    sports: list[str] | None = None
    regions: list[str] | None = None
    improvement_threshold: float | None = Field(default=None, gt=0)
    new_assessment_alert: bool = False
    elite_threshold_alert: bool = False


class RuleRecipients(BaseModel):
    officials: list[str] = Field(default_factory=list)
    email_addresses: list[str] = Field(default_factory=list)
    phone_numbers: list[str] = Field(default_factory=list)


class NotificationRule(BaseModel):
    """A configured notification rule."""

    id: str = Field(default_factory=lambda: new_id("rule"))
    name: str
    description: str = ""
    active: bool = True
    conditions: RuleConditions = Field(default_factory=RuleConditions)
    recipients: RuleRecipients = Field(default_factory=RuleRecipients)
    frequency: RuleFrequency = RuleFrequency.IMMEDIATE
    priority: Priority = Priority.MEDIUM


class AlertPayload(BaseModel):
    current_score: float | None = None
    previous_score: float | None = None
    improvement: float | None = None
    percentile: float | None = None
    recommended_sports: list[str] = Field(default_factory=list)
    location: str | None = None
    region: str | None = None
    age: int | None = None


class Alert(BaseModel):
    """A talent alert.

    Only ``delivered``, ``read_by`` and ``archived`` change after creation.
    """

    id: str = Field(default_factory=lambda: new_id("alert"))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    type: AlertType
    priority: Priority
    subject_id: str
    subject_name: str
    title: str
    message: str
    payload: AlertPayload = Field(default_factory=AlertPayload)
    action_required: bool = False
    action_items: list[str] = Field(default_factory=list)
    recipients: list[str] = Field(default_factory=list)
    rule_id: str | None = None
    delivered: bool = False
    read_by: list[str] = Field(default_factory=list)
    archived: bool = False

    def is_read_by(self, user_id: str) -> bool:
        return user_id in self.read_by


class ChannelType(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    DASHBOARD = "dashboard"


class ChannelSettings(BaseModel):
    enabled: bool = False
    options: dict[str, Any] = Field(default_factory=dict)


def _default_channels() -> dict[ChannelType, ChannelSettings]:
    return {
        ChannelType.EMAIL: ChannelSettings(enabled=True),
        ChannelType.DASHBOARD: ChannelSettings(enabled=True),
    }


class DeliveryConfig(BaseModel):
    """Channel settings; email and dashboard are enabled by default."""

    channels: dict[ChannelType, ChannelSettings] = Field(default_factory=_default_channels)

    def enabled_channels(self) -> list[ChannelType]:
        return [channel for channel, settings in self.channels.items() if settings.enabled]
