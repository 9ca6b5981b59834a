"""Consent, access validation, export and audit log endpoints.

- PUT /consents/{subject_id} - Record consent (replaces any previous record)
- GET /consents/{subject_id} - Current consent record
- DELETE /consents/{subject_id} - Remove a consent record
- POST /consents/purge-expired - Retention cleanup
- POST /access/validate - Partition subjects into allowed and denied
- POST /exports - Consent-validated export
- GET /audit-log - Query audit entries
"""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status

from talentwatch.api.dependencies import ActorId, ServicesDep
from talentwatch.api.schemas.compliance import (
    AccessValidationRequest,
    AccessValidationResponse,
    AuditLogResponse,
    ConsentListResponse,
    ConsentRequest,
    ExportRequest,
    ExportResponse,
    PurgeResponse,
)
from talentwatch.compliance.anonymizer import AnonymizationOptions
from talentwatch.compliance.consent import ConsentContext, ConsentRecord
from talentwatch.core.audit import AuditAction
from talentwatch.core.exceptions import NotFoundError

router = APIRouter(tags=["compliance"])


# =============================================================================
# Consent
# =============================================================================


@router.get("/consents", response_model=ConsentListResponse, summary="List consent records")
async def list_consents(services: ServicesDep) -> ConsentListResponse:
    records = await services.consents.list_records()
    return ConsentListResponse(records=records, total=len(records))


@router.put(
    "/consents/{subject_id}",
    response_model=ConsentRecord,
    summary="Record consent",
    description="Stores the subject's consent flags. A previous record is replaced.",
)
async def record_consent(
    subject_id: str,
    body: ConsentRequest,
    request: Request,
    services: ServicesDep,
) -> ConsentRecord:
    context = ConsentContext(
        ip_address=request.client.host if request.client else "localhost",
        user_agent=request.headers.get("User-Agent", "unknown"),
    )
    return await services.consents.record(subject_id, body.scopes(), body.retention_years, context=context)


@router.get("/consents/{subject_id}", response_model=ConsentRecord, summary="Get consent record")
async def get_consent(subject_id: str, services: ServicesDep) -> ConsentRecord:
    record = await services.consents.get(subject_id)
    if record is None:
        raise NotFoundError("consent", subject_id)
    return record


@router.delete(
    "/consents/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete consent record",
)
async def delete_consent(subject_id: str, services: ServicesDep, actor_id: ActorId) -> None:
    if not await services.consents.delete(subject_id):
        raise NotFoundError("consent", subject_id)
    await services.audit_log.log_event(
        action=AuditAction.DELETE,
        actor_id=actor_id,
        subject_ids=[subject_id],
        data_types=["consent"],
        purpose="Privacy consent withdrawn",
    )


@router.post(
    "/consents/purge-expired",
    response_model=PurgeResponse,
    summary="Purge expired consent",
    description="Deletes consent records past their retention window. Safe to re-run.",
)
async def purge_expired_consents(services: ServicesDep) -> PurgeResponse:
    result = await services.retention.purge_expired_consents()
    return PurgeResponse(
        deleted_consents=result.deleted_consents,
        deleted_count=result.deleted_count,
        checked=result.checked,
    )


# =============================================================================
# Access Validation
# =============================================================================


@router.post(
    "/access/validate",
    response_model=AccessValidationResponse,
    summary="Validate access for a purpose",
)
async def validate_access(
    body: AccessValidationRequest,
    services: ServicesDep,
    actor_id: ActorId,
) -> AccessValidationResponse:
    decision = await services.validator.validate(actor_id, body.subject_ids, body.purpose)
    return AccessValidationResponse(**decision.to_dict())


# =============================================================================
# Export
# =============================================================================


@router.post(
    "/exports",
    response_model=ExportResponse,
    summary="Export subject data",
    description="""
    Exports stored subjects that consented to the stated purpose.

    Subjects without consent are silently dropped; metadata.subject_count
    reports how many were included.
    """,
)
async def create_export(body: ExportRequest, services: ServicesDep, actor_id: ActorId) -> ExportResponse:
    subjects = []
    assessments_by_subject = {}
    for subject_id in dict.fromkeys(body.subject_ids):
        subject = await services.directory.get_subject_by_id(subject_id)
        if subject is None:
            raise NotFoundError("subject", subject_id)
        subjects.append(subject)
        assessments_by_subject[subject_id] = await services.directory.get_subject_assessments(subject_id)

    options = (body.options or AnonymizationOptions()) if body.anonymize else None
    result = await services.exporter.create_export(
        subjects, assessments_by_subject, actor_id=actor_id, purpose=body.purpose, options=options
    )
    return ExportResponse(data=result.data, metadata=result.metadata.model_dump(mode="json"))


# =============================================================================
# Audit Log
# =============================================================================


@router.get(
    "/audit-log",
    response_model=AuditLogResponse,
    summary="Query audit log",
    description="Audit entries, newest first.",
)
async def query_audit_log(
    services: ServicesDep,
    subject_id: Annotated[str | None, Query(description="Entries touching this subject")] = None,
    actor_id: Annotated[str | None, Query(description="Entries by this actor")] = None,
    action: Annotated[AuditAction | None, Query(description="Entries of this action")] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> AuditLogResponse:
    entries = await services.audit_log.query_events(
        subject_id=subject_id, actor_id=actor_id, action=action, limit=limit
    )
    return AuditLogResponse(entries=entries, total=len(entries))
