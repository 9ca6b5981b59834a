"""Recruitment reporting over persisted alerts."""

from talentwatch.reporting.generator import (
    ReportGenerator,
    daily_window,
    monthly_window,
    weekly_window,
)
from talentwatch.reporting.types import (
    Direction,
    RecruitmentReport,
    ReportActions,
    ReportInsights,
    ReportPeriod,
    ReportSummary,
    ReportType,
    TopTalent,
    TrendAnalysis,
)

__all__ = [
    "Direction",
    "RecruitmentReport",
    "ReportActions",
    "ReportGenerator",
    "ReportInsights",
    "ReportPeriod",
    "ReportSummary",
    "ReportType",
    "TopTalent",
    "TrendAnalysis",
    "daily_window",
    "monthly_window",
    "weekly_window",
]
