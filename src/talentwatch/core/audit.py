"""Audit trail for security-relevant actions.

Entries are immutable and append-only; the backing log keeps only the
most recent entries (1,000 by default).
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from talentwatch.config.settings import get_settings
from talentwatch.core.logging import get_logger
from talentwatch.storage.base import BlobStore
from talentwatch.storage.repository import CappedLog
from talentwatch.utils.ids import new_id

logger = get_logger(__name__)

SYSTEM_ACTOR = "system"
MAX_QUERY_LIMIT = 1000


class AuditAction(str, Enum):
    """Kinds of audited actions."""

    ACCESS = "access"
    EXPORT = "export"
    SYNC = "sync"
    ANONYMIZE = "anonymize"
    DELETE = "delete"


class AuditLogEntry(BaseModel):
    """A single immutable audit record."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: new_id("log"))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction
    actor_id: str
    subject_ids: list[str] = Field(default_factory=list)
    data_types: list[str] = Field(default_factory=list)
    purpose: str
    ip_address: str = "localhost"
    success: bool = True
    details: str | None = None


class AuditLog:
    """Service for recording and querying audit entries."""

    def __init__(self, store: BlobStore, max_entries: int | None = None):
        """Initialize audit log.

        Args:
            store: Blob store holding the log
            max_entries: Retention cap (default from settings)
        """
        cap = max_entries or get_settings().retention.audit_log_max_entries
        self._log = CappedLog(store, "audit:entries", AuditLogEntry, max_entries=cap)

    async def log_event(
        self,
        action: AuditAction,
        actor_id: str,
        subject_ids: list[str],
        data_types: list[str],
        purpose: str,
        success: bool = True,
        details: str | None = None,
        ip_address: str = "localhost",
    ) -> AuditLogEntry:
        """Append an audit entry.

        Returns:
            The stored entry
        """
        entry = AuditLogEntry(
            action=action,
            actor_id=actor_id,
            subject_ids=subject_ids,
            data_types=data_types,
            purpose=purpose,
            success=success,
            details=details,
            ip_address=ip_address,
        )
        await self._log.append(entry)
        logger.debug(
            "audit_entry_recorded",
            action=action.value,
            actor_id=actor_id,
            subject_count=len(subject_ids),
            success=success,
        )
        return entry

    async def query_events(
        self,
        subject_id: str | None = None,
        actor_id: str | None = None,
        action: AuditAction | None = None,
        limit: int = 100,
    ) -> list[AuditLogEntry]:
        """Query audit entries, newest first.

        Args:
            subject_id: Only entries touching this subject
            actor_id: Only entries by this actor
            action: Only entries of this action
            limit: Maximum entries returned (capped at 1000)
        """
        entries = await self._log.list_all()
        if subject_id is not None:
            entries = [e for e in entries if subject_id in e.subject_ids]
        if actor_id is not None:
            entries = [e for e in entries if e.actor_id == actor_id]
        if action is not None:
            entries = [e for e in entries if e.action == action]

        # Appended later wins ties on identical timestamps
        entries.reverse()
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[: min(limit, MAX_QUERY_LIMIT)]
