"""Notification rule endpoints."""

from fastapi import APIRouter, status

from talentwatch.api.dependencies import ServicesDep
from talentwatch.api.schemas.alerts import RuleCreateRequest, RuleListResponse, RuleUpdateRequest
from talentwatch.core.exceptions import NotFoundError
from talentwatch.notifications.types import NotificationRule

router = APIRouter(prefix="/rules", tags=["rules"])


@router.get("", response_model=RuleListResponse, summary="List rules")
async def list_rules(services: ServicesDep, active_only: bool = False) -> RuleListResponse:
    rules = await services.rules.list_rules(active_only=active_only)
    return RuleListResponse(rules=rules, total=len(rules))


@router.post("", response_model=NotificationRule, status_code=status.HTTP_201_CREATED, summary="Create rule")
async def create_rule(body: RuleCreateRequest, services: ServicesDep) -> NotificationRule:
    return await services.rules.create_rule(NotificationRule(**body.model_dump()))


@router.get("/{rule_id}", response_model=NotificationRule, summary="Get rule")
async def get_rule(rule_id: str, services: ServicesDep) -> NotificationRule:
    rule = await services.rules.get_rule(rule_id)
    if rule is None:
        raise NotFoundError("rule", rule_id)
    return rule


@router.patch("/{rule_id}", response_model=NotificationRule, summary="Update rule")
async def update_rule(rule_id: str, body: RuleUpdateRequest, services: ServicesDep) -> NotificationRule:
    return await services.rules.update_rule(rule_id, body.model_dump(exclude_unset=True))


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete rule")
async def delete_rule(rule_id: str, services: ServicesDep) -> None:
    await services.rules.delete_rule(rule_id)
