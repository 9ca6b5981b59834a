"""Assessment processing and registry sync endpoints."""

from typing import Any

from fastapi import APIRouter

from talentwatch.api.dependencies import ActorId, ServicesDep
from talentwatch.api.schemas.reports import SyncRequest
from talentwatch.core.exceptions import NotFoundError
from talentwatch.pipeline import DEFAULT_PURPOSE

router = APIRouter(tags=["assessments"])


@router.post("/assessments/{assessment_id}/process", summary="Process a new assessment")
async def process_assessment(
    assessment_id: str,
    services: ServicesDep,
    actor_id: ActorId,
    purpose: str = DEFAULT_PURPOSE,
) -> dict[str, Any]:
    """Score an assessment, apply consent and evaluate notification rules."""
    result = await services.pipeline.process_assessment(assessment_id, actor_id=actor_id, purpose=purpose)
    return result.to_dict()


@router.post("/registry/sync", summary="Sync subjects to the talent registry")
async def sync_subjects(body: SyncRequest, services: ServicesDep) -> dict[str, Any]:
    """Bulk sync. Each subject is reported as synced, failed or consent denied."""
    subjects = []
    assessments_by_subject = {}
    for subject_id in dict.fromkeys(body.subject_ids):
        subject = await services.directory.get_subject_by_id(subject_id)
        if subject is None:
            raise NotFoundError("subject", subject_id)
        subjects.append(subject)
        assessments_by_subject[subject_id] = await services.directory.get_subject_assessments(subject_id)

    report = await services.sync.bulk_sync(subjects, assessments_by_subject)
    return report.to_dict()
