"""Consent-validated data export."""

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from talentwatch.compliance.access import AccessValidator
from talentwatch.compliance.anonymizer import AnonymizationOptions, Anonymizer
from talentwatch.core.audit import AuditAction, AuditLog
from talentwatch.core.logging import get_logger
from talentwatch.subjects import AssessmentResult, SubjectProfile
from talentwatch.utils.ids import new_id

logger = get_logger(__name__)


class ExportMetadata(BaseModel):
    export_id: str = Field(default_factory=lambda: new_id("export"))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    actor_id: str
    purpose: str
    subject_count: int
    anonymized: bool
    consent_validated: bool = True


class ExportResult(BaseModel):
    """Exported records plus provenance metadata."""

    data: list[dict[str, Any]]
    metadata: ExportMetadata


class SecureExporter:
    """Exports subject data restricted to subjects that consented."""

    def __init__(self, validator: AccessValidator, anonymizer: Anonymizer, audit_log: AuditLog):
        self._validator = validator
        self._anonymizer = anonymizer
        self._audit = audit_log

    async def create_export(
        self,
        subjects: Sequence[SubjectProfile],
        assessments_by_subject: Mapping[str, Sequence[AssessmentResult]],
        actor_id: str,
        purpose: str,
        options: AnonymizationOptions | None = None,
    ) -> ExportResult:
        """Export consenting subjects.

        Subjects denied for ``purpose`` are dropped. When ``options`` is
        given every exported subject is anonymized; otherwise full profiles
        with their assessments are returned.
        """
        decision = await self._validator.validate(
            actor_id, [s.subject_id for s in subjects], purpose
        )
        allowed = [s for s in subjects if decision.is_allowed(s.subject_id)]

        data: list[dict[str, Any]] = []
        for subject in allowed:
            assessments = list(assessments_by_subject.get(subject.subject_id, []))
            if options is not None:
                record = await self._anonymizer.anonymize(subject, assessments, options, actor_id=actor_id)
                data.append(record.model_dump(mode="json"))
            else:
                entry = subject.model_dump(mode="json")
                entry["assessments"] = [a.model_dump(mode="json") for a in assessments]
                data.append(entry)

        metadata = ExportMetadata(
            actor_id=actor_id,
            purpose=purpose,
            subject_count=len(allowed),
            anonymized=options is not None,
        )
        await self._audit.log_event(
            action=AuditAction.EXPORT,
            actor_id=actor_id,
            subject_ids=[s.subject_id for s in allowed],
            data_types=["athlete_profiles", "assessments"],
            purpose=purpose,
            details=f"Export ID: {metadata.export_id}, Anonymized: {metadata.anonymized}",
        )
        logger.info(
            "export_created",
            export_id=metadata.export_id,
            subject_count=metadata.subject_count,
            denied=len(decision.denied),
            anonymized=metadata.anonymized,
        )
        return ExportResult(data=data, metadata=metadata)
