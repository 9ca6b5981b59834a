"""Alert endpoints.

- GET /alerts - Query alerts, newest first
- GET /alerts/delivery-config - Channel configuration
- PUT /alerts/delivery-config - Replace channel configuration
- GET /alerts/{alert_id} - Single alert
- POST /alerts/{alert_id}/read - Mark read for a user
- POST /alerts/{alert_id}/archive - Archive
"""

from typing import Annotated

from fastapi import APIRouter, Query

from talentwatch.api.dependencies import ServicesDep
from talentwatch.api.schemas.alerts import AlertListResponse, MarkReadRequest
from talentwatch.core.exceptions import NotFoundError
from talentwatch.notifications.types import Alert, AlertType, DeliveryConfig
from talentwatch.scoring.types import Priority

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse, summary="Query alerts")
async def query_alerts(
    services: ServicesDep,
    alert_type: Annotated[AlertType | None, Query(alias="type")] = None,
    priority: Annotated[Priority | None, Query()] = None,
    recipient_id: Annotated[str | None, Query(description="Alerts addressed to this recipient")] = None,
    unread_only: Annotated[bool, Query(description="Only alerts recipient_id has not read")] = False,
    include_archived: bool = True,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> AlertListResponse:
    alerts = await services.dispatcher.query(
        alert_type=alert_type,
        priority=priority,
        unread_only=unread_only,
        recipient_id=recipient_id,
        include_archived=include_archived,
        limit=limit,
    )
    return AlertListResponse(alerts=alerts, total=len(alerts))


@router.get("/delivery-config", response_model=DeliveryConfig, summary="Get delivery channels")
async def get_delivery_config(services: ServicesDep) -> DeliveryConfig:
    return await services.dispatcher.get_delivery_config()


@router.put("/delivery-config", response_model=DeliveryConfig, summary="Configure delivery channels")
async def configure_delivery(body: DeliveryConfig, services: ServicesDep) -> DeliveryConfig:
    await services.dispatcher.configure_channels(body)
    return body


@router.get("/{alert_id}", response_model=Alert, summary="Get alert")
async def get_alert(alert_id: str, services: ServicesDep) -> Alert:
    alert = await services.dispatcher.get(alert_id)
    if alert is None:
        raise NotFoundError("alert", alert_id)
    return alert


@router.post("/{alert_id}/read", response_model=Alert, summary="Mark alert read")
async def mark_alert_read(alert_id: str, body: MarkReadRequest, services: ServicesDep) -> Alert:
    return await services.dispatcher.mark_read(alert_id, body.user_id)


@router.post("/{alert_id}/archive", response_model=Alert, summary="Archive alert")
async def archive_alert(alert_id: str, services: ServicesDep) -> Alert:
    return await services.dispatcher.archive(alert_id)
