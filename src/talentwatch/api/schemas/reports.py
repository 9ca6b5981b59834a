"""Request and response schemas for report and registry endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from talentwatch.reporting.types import RecruitmentReport, ReportType


class ReportRequest(BaseModel):
    type: ReportType
    start: datetime
    end: datetime
    title: str | None = None


class ReportListResponse(BaseModel):
    reports: list[RecruitmentReport]
    total: int


class SyncRequest(BaseModel):
    subject_ids: list[str] = Field(..., min_length=1)
