"""Recruitment report endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from talentwatch.api.dependencies import ServicesDep
from talentwatch.api.schemas.reports import ReportListResponse, ReportRequest
from talentwatch.reporting.types import RecruitmentReport

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "",
    response_model=RecruitmentReport,
    status_code=status.HTTP_201_CREATED,
    summary="Generate report",
    description="Generates a report for the window, or returns the one already stored for it.",
)
async def generate_report(body: ReportRequest, services: ServicesDep) -> RecruitmentReport:
    return await services.reports.generate(body.type, body.start, body.end, title=body.title)


@router.get("", response_model=ReportListResponse, summary="List reports")
async def list_reports(
    services: ServicesDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> ReportListResponse:
    reports = await services.reports.list_reports(limit=limit)
    return ReportListResponse(reports=reports, total=len(reports))


@router.get("/{report_id}", response_model=RecruitmentReport, summary="Get report")
async def get_report(report_id: str, services: ServicesDep) -> RecruitmentReport:
    return await services.reports.get_report(report_id)
