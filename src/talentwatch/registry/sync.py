"""Consent-gated synchronisation of talent profiles to the registry.

When the registry is unreachable, sync returns the locally built profile
flagged ``synthetic=True`` and logs a warning. Consent and authentication
failures are never masked by the fallback.
"""

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from talentwatch.compliance.access import AccessValidator
from talentwatch.compliance.consent import ConsentScope, ConsentStore
from talentwatch.config.settings import get_settings
from talentwatch.core.audit import AuditAction, AuditLog
from talentwatch.core.batching import run_batched
from talentwatch.core.exceptions import ConsentDeniedError, RegistryUnavailableError
from talentwatch.core.logging import LogContext, get_logger
from talentwatch.registry.client import TalentRegistryClient
from talentwatch.registry.types import (
    ExportTicket,
    RecruitmentStatus,
    SyncReport,
    TalentAssessmentSummary,
    TalentLocation,
    TalentProfile,
)
from talentwatch.subjects import AssessmentResult, SubjectProfile, TestType

logger = get_logger(__name__)

SYNC_PURPOSE = "sai_sync"
UNKNOWN_ACTOR = "unknown"

SPORT_SUGGESTIONS: dict[TestType, list[str]] = {
    TestType.SPEED: ["athletics", "football", "hockey"],
    TestType.STRENGTH: ["weightlifting", "wrestling", "shot_put"],
    TestType.AGILITY: ["badminton", "basketball", "football"],
    TestType.ENDURANCE: ["athletics", "cycling", "swimming"],
    TestType.FLEXIBILITY: ["gymnastics", "yoga", "dance"],
    TestType.BALANCE: ["gymnastics", "skiing", "surfing"],
}


def build_talent_profile(subject: SubjectProfile, assessments: Sequence[AssessmentResult]) -> TalentProfile:
    """Summarise a subject for submission to the registry."""
    average = sum(a.score for a in assessments) / len(assessments) if assessments else 0.0

    potential: list[str] = []
    for assessment in assessments:
        if assessment.score >= 70:
            for sport in SPORT_SUGGESTIONS[assessment.test_type]:
                if sport not in potential:
                    potential.append(sport)

    return TalentProfile(
        subject_id=subject.subject_id,
        name=subject.name,
        age=subject.age,
        location=TalentLocation(state=subject.state, district=subject.city, city=subject.city),
        sports_categories=list(subject.sports),
        assessment_summary=TalentAssessmentSummary(
            total_assessments=len(assessments),
            average_score=round(average, 2),
            percentile_rank=min(round(average / 100 * 90 + 10), 99),
            strengths=[a.test_type.value for a in assessments if a.score >= 75][:3],
            potential_sports=potential[:5],
        ),
        recruitment_status=RecruitmentStatus.IDENTIFIED if average >= 80 else RecruitmentStatus.NOT_ELIGIBLE,
    )


class TalentSyncService:
    """Pushes consenting subjects' profiles to the talent registry."""

    def __init__(
        self,
        client: TalentRegistryClient,
        validator: AccessValidator,
        consents: ConsentStore,
        audit_log: AuditLog,
    ):
        self._client = client
        self._validator = validator
        self._consents = consents
        self._audit = audit_log

    @property
    def actor_id(self) -> str:
        return self._client.official_id or UNKNOWN_ACTOR

    async def sync_subject(
        self,
        subject: SubjectProfile,
        assessments: Sequence[AssessmentResult],
    ) -> TalentProfile:
        """Sync one subject.

        Raises:
            ConsentDeniedError: If talent identification consent is missing or expired
            AuthExpiredError: If the registry token cannot be refreshed
        """
        if not await self._consents.has_valid_consent(subject.subject_id, ConsentScope.TALENT_IDENTIFICATION):
            raise ConsentDeniedError(
                f"No valid consent for talent identification: {subject.name}",
                subject_id=subject.subject_id,
                purpose="talent_identification",
            )

        profile = build_talent_profile(subject, assessments)
        await self._audit.log_event(
            action=AuditAction.SYNC,
            actor_id=self.actor_id,
            subject_ids=[subject.subject_id],
            data_types=["athlete_data", "assessments"],
            purpose="SAI talent identification sync",
        )

        try:
            return await self._client.sync_profile(profile)
        except RegistryUnavailableError as e:
            logger.warning(
                "registry_sync_fallback",
                subject_id=subject.subject_id,
                operation=e.operation,
                status_code=e.status_code,
                error=str(e),
            )
            return profile.model_copy(update={"synthetic": True})

    async def bulk_sync(
        self,
        subjects: Sequence[SubjectProfile],
        assessments_by_subject: Mapping[str, Sequence[AssessmentResult]],
    ) -> SyncReport:
        """Sync many subjects in fixed-size batches.

        Every input subject lands in exactly one of ``success``, ``failed``
        or ``consent_denied``.
        """
        actor_id = self.actor_id
        with LogContext(actor_id=actor_id, operation="bulk_sync"):
            decision = await self._validator.validate(actor_id, [s.subject_id for s in subjects], SYNC_PURPOSE)
            report = SyncReport(consent_denied=dict(decision.reasons))

            allowed: list[SubjectProfile] = []
            seen: set[str] = set()
            for subject in subjects:
                if decision.is_allowed(subject.subject_id) and subject.subject_id not in seen:
                    seen.add(subject.subject_id)
                    allowed.append(subject)

            async def worker(subject: SubjectProfile) -> TalentProfile:
                return await self.sync_subject(subject, assessments_by_subject.get(subject.subject_id, []))

            batching = get_settings().batching
            outcomes = await run_batched(
                allowed,
                worker,
                batch_size=batching.batch_size,
                max_concurrency=batching.max_concurrency,
            )
            for outcome in outcomes:
                if outcome.ok:
                    report.success.append(outcome.result)
                else:
                    report.failed[outcome.item.subject_id] = str(outcome.error)

            logger.info(
                "bulk_sync_completed",
                success=len(report.success),
                failed=len(report.failed),
                consent_denied=len(report.consent_denied),
            )
        return report

    async def export_talent_data(self, filters: dict[str, Any], file_format: str = "excel") -> ExportTicket:
        """Request a registry export, falling back to a local placeholder ticket."""
        try:
            return await self._client.export_talent_data(filters, file_format)
        except RegistryUnavailableError as e:
            logger.warning("registry_export_fallback", operation=e.operation, error=str(e))
            now = datetime.now(UTC)
            return ExportTicket(
                download_url=f"local://exports/talent_export_{int(now.timestamp())}.{file_format}",
                file_name=f"talent_export_{now.date().isoformat()}.{file_format}",
                expires_at=now + timedelta(hours=24),
                synthetic=True,
            )
