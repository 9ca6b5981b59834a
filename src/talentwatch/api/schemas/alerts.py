"""Request and response schemas for alert and rule endpoints."""

from pydantic import BaseModel, Field

from talentwatch.notifications.types import Alert, NotificationRule, RuleConditions, RuleFrequency, RuleRecipients
from talentwatch.scoring.types import Priority


class AlertListResponse(BaseModel):
    alerts: list[Alert]
    total: int


class MarkReadRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class RuleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    active: bool = True
    conditions: RuleConditions = Field(default_factory=RuleConditions)
    recipients: RuleRecipients = Field(default_factory=RuleRecipients)
    frequency: RuleFrequency = RuleFrequency.IMMEDIATE
    priority: Priority = Priority.MEDIUM


class RuleUpdateRequest(BaseModel):
    """Partial rule update. Only fields that are set are applied."""

    name: str | None = None
    description: str | None = None
    active: bool | None = None
    conditions: RuleConditions | None = None
    recipients: RuleRecipients | None = None
    frequency: RuleFrequency | None = None
    priority: Priority | None = None


class RuleListResponse(BaseModel):
    rules: list[NotificationRule]
    total: int
