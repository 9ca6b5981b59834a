"""Retention cleanup for expired consent."""

from dataclasses import dataclass
from datetime import UTC, datetime

from talentwatch.compliance.consent import ConsentStore
from talentwatch.core.audit import SYSTEM_ACTOR, AuditAction, AuditLog
from talentwatch.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PurgeResult:
    deleted_consents: list[str]
    checked: int

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_consents)


class RetentionManager:
    """Removes consent records whose retention window has elapsed."""

    def __init__(self, consent_store: ConsentStore, audit_log: AuditLog):
        self._consents = consent_store
        self._audit = audit_log

    async def purge_expired_consents(self, now: datetime | None = None) -> PurgeResult:
        """Delete expired consent records.

        Safe to re-run: a second call finds nothing to delete and writes
        no audit entry.
        """
        now = now or datetime.now(UTC)
        records = await self._consents.list_records()
        expired = [r.subject_id for r in records if r.is_expired(now)]

        for subject_id in expired:
            await self._consents.delete(subject_id)

        if expired:
            await self._audit.log_event(
                action=AuditAction.DELETE,
                actor_id=SYSTEM_ACTOR,
                subject_ids=expired,
                data_types=["expired_data"],
                purpose="Automated data retention cleanup",
            )
        logger.info("retention_cleanup_completed", checked=len(records), deleted=len(expired))
        return PurgeResult(deleted_consents=expired, checked=len(records))
