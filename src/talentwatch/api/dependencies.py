"""FastAPI dependencies for API endpoints."""

from typing import Annotated

from fastapi import Depends, Request

from talentwatch.core.audit import SYSTEM_ACTOR
from talentwatch.services import Services

__all__ = [
    "ActorId",
    "ServicesDep",
    "get_actor_id",
    "get_request_id",
    "get_services",
]


def get_services(request: Request) -> Services:
    """Get the service container created with the app."""
    return request.app.state.services


def get_actor_id(request: Request) -> str:
    """Get the acting official set by RequestContextMiddleware."""
    return getattr(request.state, "actor_id", SYSTEM_ACTOR)


def get_request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


ServicesDep = Annotated[Services, Depends(get_services)]
ActorId = Annotated[str, Depends(get_actor_id)]
