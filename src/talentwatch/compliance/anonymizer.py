"""Anonymization of subject detail into bucketed summaries.

This module provides the Anonymizer class for reducing a subject profile
and its assessments to a record safe for aggregate analytics:
- Salted SHA-256 identifier hashing
- Age, score and percentile bucketing
- Location generalization to state level

Bucketing is deterministic; only the identifier hash depends on the salt.
"""

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel, Field

from talentwatch.config.settings import get_settings
from talentwatch.core.audit import SYSTEM_ACTOR, AuditAction, AuditLog
from talentwatch.core.batching import BatchOutcome, run_batched
from talentwatch.core.logging import get_logger
from talentwatch.subjects import AssessmentResult, SubjectProfile

logger = get_logger(__name__)


# =============================================================================
# Options and Output
# =============================================================================


class AnonymizationOptions(BaseModel):
    """Flags controlling how much detail survives anonymization."""

    hide_personal_info: bool = True
    """Name and exact age are never emitted; kept for API parity."""

    hash_identifiers: bool = True
    """Replace subject id with a salted hash."""

    generalize_location: bool = True
    """Emit state only instead of "city, state"."""

    remove_contact_info: bool = True
    """Contact details are never emitted; kept for API parity."""

    aggregate_scores: bool = True
    """Emit score as a decade range instead of the raw average."""


class AssessmentSummary(BaseModel):
    """Bucketed view of a subject's assessments."""

    total_assessments: int
    score_range: str
    percentile_range: str
    performance_level: str


class AnonymizedRecord(BaseModel):
    """De-identified subject summary."""

    id: str
    age_range: str
    region: str
    sports_categories: list[str] = Field(default_factory=list)
    assessment_summary: AssessmentSummary
    last_assessment_date: str


@dataclass
class AnonymizationBatch:
    """Result of anonymizing many subjects.

    Attributes:
        records: Successfully anonymized records, in input order
        failed: Subject ids that raised during anonymization
    """

    records: list[AnonymizedRecord]
    failed: list[str]


# =============================================================================
# Bucketing
# =============================================================================


def age_range(age: int) -> str:
    if age < 16:
        return "Under 16"
    if age < 18:
        return "16-17"
    if age < 21:
        return "18-20"
    if age < 25:
        return "21-24"
    return "25+"


def score_range(score: float) -> str:
    """Decade bucket such as ``70-79``."""
    lower = int(score // 10) * 10
    return f"{lower}-{lower + 9}"


def percentile_range(average_score: float) -> str:
    """Decade bucket of the approximate percentile, e.g. ``80-89th``."""
    percentile = min(round(average_score / 100 * 90 + 10), 99)
    lower = (percentile // 10) * 10
    return f"{lower}-{lower + 9}th"


def performance_level(average_score: float) -> str:
    if average_score >= 85:
        return "excellent"
    if average_score >= 75:
        return "good"
    if average_score >= 60:
        return "average"
    return "below_average"


class Anonymizer:
    """Produces AnonymizedRecords and audits every anonymization."""

    def __init__(self, audit_log: AuditLog, hash_salt: str | None = None):
        """Initialize the anonymizer.

        Args:
            audit_log: Audit trail
            hash_salt: Salt for identifier hashing (default from settings)
        """
        self._audit = audit_log
        if hash_salt is None:
            hash_salt = get_settings().anonymizer_hash_salt.get_secret_value()
        self._salt = hash_salt

    def hash_identifier(self, value: str) -> str:
        digest = hashlib.sha256(f"{self._salt}:{value}".encode()).hexdigest()
        return f"anon_{digest[:16]}"

    def summarize(
        self,
        subject: SubjectProfile,
        assessments: Sequence[AssessmentResult],
        options: AnonymizationOptions | None = None,
    ) -> AnonymizedRecord:
        """Build the anonymized record without auditing."""
        options = options or AnonymizationOptions()
        average = sum(a.score for a in assessments) / len(assessments) if assessments else 0.0

        if assessments:
            latest = max(assessments, key=lambda a: a.timestamp)
            last_date = f"{latest.timestamp.month}/{latest.timestamp.year}"
        else:
            last_date = "N/A"

        if options.generalize_location or not subject.city:
            region = subject.state
        else:
            region = f"{subject.city}, {subject.state}"

        return AnonymizedRecord(
            id=self.hash_identifier(subject.subject_id) if options.hash_identifiers else subject.subject_id,
            age_range=age_range(subject.age),
            region=region,
            sports_categories=list(subject.sports),
            assessment_summary=AssessmentSummary(
                total_assessments=len(assessments),
                score_range=score_range(average) if options.aggregate_scores else f"{average:.1f}",
                percentile_range=percentile_range(average),
                performance_level=performance_level(average),
            ),
            last_assessment_date=last_date,
        )

    async def anonymize(
        self,
        subject: SubjectProfile,
        assessments: Sequence[AssessmentResult],
        options: AnonymizationOptions | None = None,
        actor_id: str = SYSTEM_ACTOR,
    ) -> AnonymizedRecord:
        """Anonymize one subject and record an "anonymize" audit entry."""
        record = self.summarize(subject, assessments, options)
        await self._audit.log_event(
            action=AuditAction.ANONYMIZE,
            actor_id=actor_id,
            subject_ids=[subject.subject_id],
            data_types=["athlete_data", "assessments"],
            purpose="Data anonymization",
        )
        return record

    async def anonymize_many(
        self,
        subjects: Sequence[tuple[SubjectProfile, Sequence[AssessmentResult]]],
        options: AnonymizationOptions | None = None,
        actor_id: str = SYSTEM_ACTOR,
    ) -> AnonymizationBatch:
        """Anonymize subjects in fixed-size batches.

        A subject that fails is reported in ``failed``; the rest of the
        batch continues.
        """
        batching = get_settings().batching

        async def worker(entry: tuple[SubjectProfile, Sequence[AssessmentResult]]) -> AnonymizedRecord:
            subject, assessments = entry
            return await self.anonymize(subject, assessments, options, actor_id=actor_id)

        outcomes: list[BatchOutcome] = await run_batched(
            list(subjects),
            worker,
            batch_size=batching.batch_size,
            max_concurrency=batching.max_concurrency,
        )
        batch = AnonymizationBatch(
            records=[o.result for o in outcomes if o.ok],
            failed=[o.item[0].subject_id for o in outcomes if not o.ok],
        )
        logger.info("subjects_anonymized", count=len(batch.records), failed=len(batch.failed))
        return batch
