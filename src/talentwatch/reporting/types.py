"""Type definitions for recruitment reports."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from talentwatch.scoring.types import Trend
from talentwatch.utils.ids import new_id


class ReportType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class Direction(str, Enum):
    UP = "up"
    STABLE = "stable"
    DOWN = "down"


class ReportPeriod(BaseModel):
    """Half-open window ``[start, end)``."""

    start: datetime
    end: datetime


class ReportSummary(BaseModel):
    new_talents_identified: int = 0
    total_assessments: int = 0
    average_score: float = 0.0
    regional_breakdown: dict[str, int] = Field(default_factory=dict)
    sport_breakdown: dict[str, int] = Field(default_factory=dict)
    alerts_triggered: int = 0


class TopTalent(BaseModel):
    subject_id: str
    name: str
    score: float
    sport: str
    location: str


class TrendAnalysis(BaseModel):
    score_trend: Trend
    regional_trends: dict[str, Direction] = Field(default_factory=dict)
    sport_trends: dict[str, Direction] = Field(default_factory=dict)


class ReportInsights(BaseModel):
    top_talents: list[TopTalent] = Field(default_factory=list)
    trend_analysis: TrendAnalysis
    recommendations: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class ReportActions(BaseModel):
    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list)
    long_term: list[str] = Field(default_factory=list)


class RecruitmentReport(BaseModel):
    """An immutable recruitment report."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: new_id("report"))
    title: str
    type: ReportType
    period: ReportPeriod
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    summary: ReportSummary
    insights: ReportInsights
    actions: ReportActions
