"""Consent records and their persistence.

This module provides per-subject privacy consent tracking:
- Four independently toggleable consent scopes
- Retention-window validity computed at read time
- Last-write-wins storage keyed by subject id

Consent submissions overwrite the previous record in place. Prior states
are not versioned; each overwrite is visible in the audit trail only.
"""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from talentwatch.core.audit import AuditAction, AuditLog
from talentwatch.core.logging import get_logger
from talentwatch.storage.base import BlobStore
from talentwatch.storage.repository import KeyedRepository

logger = get_logger(__name__)

DAYS_PER_RETENTION_YEAR = 365


class ConsentScope(str, Enum):
    """Permissions a subject can grant independently.

    Values are the stable external scope names.
    """

    DATA_SHARING = "dataSharing"
    TALENT_IDENTIFICATION = "talentIdentification"
    PERFORMANCE_ANALYTICS = "performanceAnalytics"
    CONTACT_PERMISSION = "contactPermission"


class ConsentContext(BaseModel):
    """Caller context captured when consent is submitted."""

    ip_address: str = "localhost"
    user_agent: str = "unknown"


class ConsentRecord(BaseModel):
    """A subject's current consent state."""

    subject_id: str
    data_sharing: bool = False
    talent_identification: bool = False
    performance_analytics: bool = False
    contact_permission: bool = False
    retention_years: int = Field(default=1, ge=0)
    consent_timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    ip_address: str = "localhost"
    user_agent: str = "unknown"

    def grants(self, scope: ConsentScope) -> bool:
        """Check whether a scope was granted, ignoring expiry."""
        return self.scopes[scope]

    @property
    def scopes(self) -> dict[ConsentScope, bool]:
        return {
            ConsentScope.DATA_SHARING: self.data_sharing,
            ConsentScope.TALENT_IDENTIFICATION: self.talent_identification,
            ConsentScope.PERFORMANCE_ANALYTICS: self.performance_analytics,
            ConsentScope.CONTACT_PERMISSION: self.contact_permission,
        }

    @property
    def expires_at(self) -> datetime:
        return self.consent_timestamp + timedelta(days=DAYS_PER_RETENTION_YEAR * self.retention_years)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Expired once strictly more than the retention window has elapsed."""
        now = now or datetime.now(UTC)
        return now - self.consent_timestamp > timedelta(
            days=DAYS_PER_RETENTION_YEAR * self.retention_years
        )

    def is_valid_for(self, scope: ConsentScope, now: datetime | None = None) -> bool:
        return not self.is_expired(now) and self.grants(scope)


_SCOPE_FIELDS: dict[ConsentScope, str] = {
    ConsentScope.DATA_SHARING: "data_sharing",
    ConsentScope.TALENT_IDENTIFICATION: "talent_identification",
    ConsentScope.PERFORMANCE_ANALYTICS: "performance_analytics",
    ConsentScope.CONTACT_PERMISSION: "contact_permission",
}


class ConsentStore:
    """Durable consent records keyed by subject id."""

    def __init__(self, store: BlobStore, audit_log: AuditLog):
        self._records = KeyedRepository(store, "consent", ConsentRecord, id_field="subject_id")
        self._audit = audit_log

    async def record(
        self,
        subject_id: str,
        scopes: Mapping[ConsentScope, bool],
        retention_years: int,
        context: ConsentContext | None = None,
        now: datetime | None = None,
    ) -> ConsentRecord:
        """Record consent for a subject, replacing any previous record.

        Args:
            subject_id: The data subject
            scopes: Granted flags; omitted scopes are recorded as not granted
            retention_years: Validity window in years
            context: Originating IP and user agent
            now: Timestamp override

        Returns:
            The stored record
        """
        context = context or ConsentContext()
        record = ConsentRecord(
            subject_id=subject_id,
            retention_years=retention_years,
            consent_timestamp=now or datetime.now(UTC),
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            **{_SCOPE_FIELDS[scope]: bool(granted) for scope, granted in scopes.items()},
        )

        previous = await self._records.get(subject_id)
        await self._records.upsert(record)
        if previous is not None:
            logger.info("consent_overwritten", subject_id=subject_id)

        await self._audit.log_event(
            action=AuditAction.ACCESS,
            actor_id=subject_id,
            subject_ids=[subject_id],
            data_types=["consent"],
            purpose="Privacy consent recorded",
            ip_address=context.ip_address,
        )
        return record

    async def get(self, subject_id: str) -> ConsentRecord | None:
        return await self._records.get(subject_id)

    async def has_valid_consent(
        self,
        subject_id: str,
        scope: ConsentScope,
        now: datetime | None = None,
    ) -> bool:
        record = await self._records.get(subject_id)
        return record is not None and record.is_valid_for(scope, now)

    async def delete(self, subject_id: str) -> bool:
        return await self._records.delete(subject_id)

    async def list_records(self) -> list[ConsentRecord]:
        return await self._records.list_all()
