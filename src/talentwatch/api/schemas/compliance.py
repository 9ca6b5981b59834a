"""Request and response schemas for consent, access and export endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from talentwatch.compliance.anonymizer import AnonymizationOptions
from talentwatch.compliance.consent import ConsentRecord, ConsentScope
from talentwatch.core.audit import AuditLogEntry


class ConsentRequest(BaseModel):
    """Consent submitted by a data subject. Omitted scopes are not granted."""

    data_sharing: bool = False
    talent_identification: bool = False
    performance_analytics: bool = False
    contact_permission: bool = False
    retention_years: int = Field(default=1, ge=0)

    def scopes(self) -> dict[ConsentScope, bool]:
        return {
            ConsentScope.DATA_SHARING: self.data_sharing,
            ConsentScope.TALENT_IDENTIFICATION: self.talent_identification,
            ConsentScope.PERFORMANCE_ANALYTICS: self.performance_analytics,
            ConsentScope.CONTACT_PERMISSION: self.contact_permission,
        }


class ConsentListResponse(BaseModel):
    records: list[ConsentRecord]
    total: int


class PurgeResponse(BaseModel):
    deleted_consents: list[str]
    deleted_count: int
    checked: int


class AccessValidationRequest(BaseModel):
    subject_ids: list[str] = Field(..., min_length=1)
    purpose: str = Field(..., min_length=1)


class AccessValidationResponse(BaseModel):
    purpose: str
    allowed: list[str]
    denied: list[str]
    reasons: dict[str, str]


class ExportRequest(BaseModel):
    """Export of stored subjects.

    When ``anonymize`` is set every exported subject is anonymized with
    ``options`` (defaults when omitted).
    """

    subject_ids: list[str] = Field(..., min_length=1)
    purpose: str = "export"
    anonymize: bool = False
    options: AnonymizationOptions | None = None


class ExportResponse(BaseModel):
    data: list[dict[str, Any]]
    metadata: dict[str, Any]


class AuditLogResponse(BaseModel):
    entries: list[AuditLogEntry]
    total: int
