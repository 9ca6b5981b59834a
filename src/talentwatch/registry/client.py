"""HTTP client for the external talent registry.

Requests carry a bearer token. A 401 response triggers exactly one token
refresh followed by one retry; a second rejection surfaces as
AuthExpiredError. Transport failures and 5xx responses raise
RegistryUnavailableError so callers can choose a fallback.
"""

import time
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from talentwatch.config.settings import Settings, get_settings
from talentwatch.core.exceptions import AuthExpiredError, RegistryUnavailableError
from talentwatch.core.logging import get_logger, log_external_call
from talentwatch.registry.types import AuthToken, ExportTicket, TalentProfile

logger = get_logger(__name__)

SERVICE_NAME = "talent_registry"


class TalentRegistryClient:
    """Async client for registry authentication, sync and export."""

    def __init__(
        self,
        settings: Settings | None = None,
        token: AuthToken | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Registry URL, credentials and timeout (default from settings)
            token: Previously issued access token
            transport: httpx transport override
        """
        self._settings = settings or get_settings()
        self._token = token
        api_key = self._settings.registry_api_key
        self._client = httpx.AsyncClient(
            base_url=self._settings.registry_base_url,
            timeout=self._settings.registry_timeout_seconds,
            transport=transport,
            headers={
                "X-API-Key": api_key.get_secret_value() if api_key else "",
                "X-Client-ID": self._settings.registry_client_id,
            },
        )

    async def __aenter__(self) -> "TalentRegistryClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    @property
    def token(self) -> AuthToken | None:
        return self._token

    @property
    def official_id(self) -> str | None:
        return self._token.official_id if self._token else None

    def is_authenticated(self) -> bool:
        return self._token is not None and not self._token.is_expired()

    def has_permission(self, permission: str) -> bool:
        return self._token is not None and permission in self._token.permissions

    def logout(self) -> None:
        self._token = None

    async def authenticate(self, official_id: str, password: str, otp: str | None = None) -> AuthToken:
        """Log in as a registry official.

        Raises:
            AuthExpiredError: If the credentials are rejected
            RegistryUnavailableError: If the registry cannot be reached
        """
        data = await self._post_unauthenticated(
            "/auth/official/login",
            {
                "officialId": official_id,
                "password": password,
                "otp": otp,
                "clientId": self._settings.registry_client_id,
            },
            operation="authenticate",
        )
        self._token = AuthToken(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken"),
            expires_at=datetime.now(UTC) + timedelta(seconds=int(data.get("expiresIn", 3600))),
            official_id=data.get("officialId", official_id),
            permissions=data.get("permissions", []),
        )
        logger.info("registry_authenticated", official_id=self._token.official_id)
        return self._token

    async def refresh_token(self) -> AuthToken:
        """Exchange the refresh token for a new access token.

        Raises:
            AuthExpiredError: If there is no refresh token or it is rejected
        """
        if self._token is None or not self._token.refresh_token:
            self.logout()
            raise AuthExpiredError("No refresh token available")

        try:
            data = await self._post_unauthenticated(
                "/auth/refresh",
                {"refreshToken": self._token.refresh_token},
                operation="refresh_token",
            )
        except AuthExpiredError:
            self.logout()
            raise

        self._token = self._token.model_copy(
            update={
                "access_token": data["accessToken"],
                "expires_at": datetime.now(UTC) + timedelta(seconds=int(data.get("expiresIn", 3600))),
            }
        )
        logger.info("registry_token_refreshed", official_id=self._token.official_id)
        return self._token

    # -------------------------------------------------------------------------
    # Registry operations
    # -------------------------------------------------------------------------

    async def sync_profile(self, profile: TalentProfile) -> TalentProfile:
        """Submit a talent profile and return the registry's stored copy."""
        data = await self.request("POST", "/talents/sync", json=profile.model_dump(mode="json"))
        return TalentProfile.model_validate(data.get("data", data))

    async def export_talent_data(self, filters: dict[str, Any], file_format: str = "excel") -> ExportTicket:
        """Request a registry-side export of matching talent records."""
        data = await self.request(
            "POST",
            "/talents/export",
            json={"filters": filters, "format": file_format, "requestedBy": self.official_id},
        )
        return ExportTicket.model_validate(data.get("data", data))

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def request(self, method: str, path: str, json: Any | None = None) -> dict[str, Any]:
        """Send an authenticated request, refreshing the token once on 401."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(2),
            retry=retry_if_exception_type(AuthExpiredError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    await self.refresh_token()
                return await self._send(method, path, json)

    async def _send(self, method: str, path: str, json: Any | None) -> dict[str, Any]:
        if self._token is None:
            raise AuthExpiredError("Registry authentication required")

        headers = {"Authorization": f"Bearer {self._token.access_token}"}
        response = await self._call(method, path, json, headers, operation=path)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthExpiredError()
        response.raise_for_status()
        return response.json()

    async def _post_unauthenticated(self, path: str, body: dict[str, Any], operation: str) -> dict[str, Any]:
        response = await self._call("POST", path, body, {}, operation=operation)
        if response.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise AuthExpiredError(f"Registry rejected {operation}")
        response.raise_for_status()
        return response.json()

    async def _call(
        self,
        method: str,
        path: str,
        json: Any | None,
        headers: dict[str, str],
        operation: str,
    ) -> httpx.Response:
        started = time.perf_counter()
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TransportError as e:
            log_external_call(
                logger, SERVICE_NAME, operation, (time.perf_counter() - started) * 1000, False, error=str(e)
            )
            raise RegistryUnavailableError(str(e) or type(e).__name__, operation=operation) from e

        duration_ms = (time.perf_counter() - started) * 1000
        log_external_call(
            logger,
            SERVICE_NAME,
            operation,
            duration_ms,
            response.is_success,
            status_code=response.status_code,
        )
        if response.status_code >= 500:
            raise RegistryUnavailableError(
                f"Registry returned {response.status_code}",
                operation=operation,
                status_code=response.status_code,
            )
        return response
