"""Purpose-based access validation over stored consent.

Classes:
    AccessDecision: Allowed/denied partition with per-subject reasons
    AccessValidator: Validates batches of subjects for a stated purpose
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from talentwatch.compliance.consent import ConsentRecord, ConsentScope, ConsentStore
from talentwatch.core.audit import SYSTEM_ACTOR, AuditAction, AuditLog
from talentwatch.core.exceptions import ConsentDeniedError, ConsentExpiredError
from talentwatch.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Purpose Mapping
# =============================================================================

PURPOSE_SCOPES: dict[str, ConsentScope] = {
    "talent_identification": ConsentScope.TALENT_IDENTIFICATION,
    "sai_sync": ConsentScope.TALENT_IDENTIFICATION,
    "assessment_analysis": ConsentScope.TALENT_IDENTIFICATION,
    "performance_analytics": ConsentScope.PERFORMANCE_ANALYTICS,
    "data_sharing": ConsentScope.DATA_SHARING,
    "export": ConsentScope.DATA_SHARING,
    "contact": ConsentScope.CONTACT_PERMISSION,
}

NO_CONSENT_REASON = "No privacy consent on record"
EXPIRED_REASON = "Consent has expired"


def scope_for_purpose(purpose: str) -> ConsentScope:
    """Map a caller-stated purpose to the scope it requires.

    Unknown purposes require data sharing consent.
    """
    return PURPOSE_SCOPES.get(purpose, ConsentScope.DATA_SHARING)


def denial_reason(
    record: ConsentRecord | None,
    purpose: str,
    now: datetime,
) -> str | None:
    """Return the denial reason for a subject, or None when access is allowed.

    Expiry is checked before the scope flag, so an expired record is always
    reported as expired.
    """
    if record is None:
        return NO_CONSENT_REASON
    if record.is_expired(now):
        return EXPIRED_REASON
    if not record.grants(scope_for_purpose(purpose)):
        return f"No consent for {purpose}"
    return None


@dataclass
class AccessDecision:
    """Partition of subjects into allowed and denied.

    Attributes:
        purpose: Purpose the decision was made for
        allowed: Subject ids permitted, in request order
        denied: Subject ids refused, in request order
        reasons: Denial reason per denied subject
    """

    purpose: str
    allowed: list[str] = field(default_factory=list)
    denied: list[str] = field(default_factory=list)
    reasons: dict[str, str] = field(default_factory=dict)

    def is_allowed(self, subject_id: str) -> bool:
        return subject_id in self.allowed

    def to_dict(self) -> dict[str, Any]:
        return {
            "purpose": self.purpose,
            "allowed": self.allowed,
            "denied": self.denied,
            "reasons": self.reasons,
        }


class AccessValidator:
    """Validates subject access against stored consent."""

    def __init__(self, consent_store: ConsentStore, audit_log: AuditLog):
        self._consents = consent_store
        self._audit = audit_log

    async def validate(
        self,
        actor_id: str,
        subject_ids: list[str],
        purpose: str,
        now: datetime | None = None,
    ) -> AccessDecision:
        """Partition subjects into allowed and denied for a purpose.

        Duplicate ids are evaluated once. Exactly one audit entry is written
        per call.

        Args:
            actor_id: Who is requesting access
            subject_ids: Subjects to check
            purpose: Caller-stated purpose
            now: Evaluation time override

        Returns:
            AccessDecision covering every distinct subject
        """
        now = now or datetime.now(UTC)
        decision = AccessDecision(purpose=purpose)
        unique_ids = list(dict.fromkeys(subject_ids))

        for subject_id in unique_ids:
            record = await self._consents.get(subject_id)
            reason = denial_reason(record, purpose, now)
            if reason is None:
                decision.allowed.append(subject_id)
            else:
                decision.denied.append(subject_id)
                decision.reasons[subject_id] = reason

        await self._audit.log_event(
            action=AuditAction.ACCESS,
            actor_id=actor_id,
            subject_ids=unique_ids,
            data_types=["consent_validation"],
            purpose=purpose,
            details=f"allowed={len(decision.allowed)}, denied={len(decision.denied)}",
        )

        logger.info(
            "access_validated",
            actor_id=actor_id,
            purpose=purpose,
            allowed=len(decision.allowed),
            denied=len(decision.denied),
        )
        return decision

    async def require(
        self,
        subject_id: str,
        purpose: str,
        actor_id: str = SYSTEM_ACTOR,
        now: datetime | None = None,
    ) -> None:
        """Ensure a single subject may be accessed for a purpose.

        Raises:
            ConsentExpiredError: If the consent record has expired
            ConsentDeniedError: If there is no record or the scope is not granted
        """
        now = now or datetime.now(UTC)
        decision = await self.validate(actor_id, [subject_id], purpose, now=now)
        if decision.is_allowed(subject_id):
            return

        reason = decision.reasons[subject_id]
        if reason == EXPIRED_REASON:
            record = await self._consents.get(subject_id)
            expiry = record.expires_at if record is not None else now
            raise ConsentExpiredError(reason, subject_id=subject_id, expiry=expiry)
        raise ConsentDeniedError(reason, subject_id=subject_id, purpose=purpose)

    async def permits(
        self,
        subject_id: str,
        purpose: str,
        fail_open: bool = False,
        now: datetime | None = None,
    ) -> bool:
        """Single-subject consent check without auditing.

        With ``fail_open`` the check allows access when no record exists,
        when the purpose is unrecognised, or when the store cannot be read.
        Only demo analytics paths enable it.
        """
        now = now or datetime.now(UTC)
        if fail_open and purpose not in PURPOSE_SCOPES:
            logger.warning("consent_check_fail_open", subject_id=subject_id, purpose=purpose, cause="unknown_purpose")
            return True

        try:
            record = await self._consents.get(subject_id)
        except Exception as e:
            if not fail_open:
                raise
            logger.warning(
                "consent_check_fail_open",
                subject_id=subject_id,
                purpose=purpose,
                cause="store_error",
                error=str(e),
            )
            return True

        if record is None and fail_open:
            logger.warning("consent_check_fail_open", subject_id=subject_id, purpose=purpose, cause="no_record")
            return True

        return denial_reason(record, purpose, now) is None
