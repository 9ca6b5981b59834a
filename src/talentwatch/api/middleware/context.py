"""Request context middleware: request ids and acting official."""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils import uuid7

from talentwatch.core.audit import SYSTEM_ACTOR
from talentwatch.core.logging import LogContext

ACTOR_HEADER = "X-Actor-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets request.state.request_id and request.state.actor_id.

    The actor comes from the X-Actor-ID header; requests without one act as
    the system actor. Both ids are bound to the log context for the
    duration of the request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid7())
        actor_id = request.headers.get(ACTOR_HEADER) or SYSTEM_ACTOR
        request.state.request_id = request_id
        request.state.actor_id = actor_id

        with LogContext(request_id=request_id, actor_id=actor_id):
            response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response
