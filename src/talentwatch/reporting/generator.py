"""Recruitment report generation.

This module provides the ReportGenerator that:
1. Aggregates persisted alerts and assessments in a time window
2. Derives trends, recommendations, risk factors and action items
3. Stores reports immutably, keeping the most recent 100

Generation is idempotent per (type, window): asking again for a window
that already has a report returns the stored one.
"""

import asyncio
import statistics
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, date, datetime, time, timedelta

from talentwatch.config.settings import get_settings
from talentwatch.core.exceptions import NotFoundError
from talentwatch.core.logging import get_logger
from talentwatch.notifications.dispatcher import AlertDispatcher
from talentwatch.notifications.types import Alert, AlertType
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
from talentwatch.scoring.types import Priority, Trend
from talentwatch.storage.base import BlobStore
from talentwatch.storage.repository import KeyedRepository
from talentwatch.subjects import AssessmentResult, AssessmentSource

logger = get_logger(__name__)

TALENT_ALERT_TYPES = (AlertType.NEW_TALENT, AlertType.ELITE_THRESHOLD)
MAX_TOP_TALENTS = 10
LOW_REGION_COUNT = 10

LONG_TERM_ACTIONS = [
    "Develop talent pipeline strategy for underperforming regions",
    "Implement enhanced assessment protocols",
    "Establish partnerships with regional training centers",
]


# =============================================================================
# Report Windows
# =============================================================================


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def daily_window(day: date) -> tuple[datetime, datetime]:
    start = _midnight(day)
    return start, start + timedelta(days=1)


def weekly_window(day: date) -> tuple[datetime, datetime]:
    """Sunday-aligned week containing ``day``."""
    days_since_sunday = (day.weekday() + 1) % 7
    start = _midnight(day - timedelta(days=days_since_sunday))
    return start, start + timedelta(days=7)


def monthly_window(year: int, month: int) -> tuple[datetime, datetime]:
    """Calendar month, ending at the first instant of the next month."""
    start = datetime(year, month, 1, tzinfo=UTC)
    end = datetime(year + 1, 1, 1, tzinfo=UTC) if month == 12 else datetime(year, month + 1, 1, tzinfo=UTC)
    return start, end


def _direction(first: int, second: int) -> Direction:
    if second > first:
        return Direction.UP
    if second < first:
        return Direction.DOWN
    return Direction.STABLE


def _region(alert: Alert) -> str:
    return alert.payload.region or "Unknown"


def _sport(alert: Alert) -> str:
    return alert.payload.recommended_sports[0] if alert.payload.recommended_sports else "Unknown"


class ReportGenerator:
    """Builds and stores recruitment reports from persisted alerts and assessments."""

    def __init__(
        self,
        store: BlobStore,
        dispatcher: AlertDispatcher,
        max_reports: int | None = None,
        assessment_source: AssessmentSource | None = None,
    ):
        cap = max_reports or get_settings().retention.report_max_entries
        self._reports = KeyedRepository(store, "reports", RecruitmentReport, max_entries=cap)
        self._dispatcher = dispatcher
        self._assessment_source = assessment_source
        self._generate_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def generate(
        self,
        report_type: ReportType,
        start: datetime,
        end: datetime,
        title: str | None = None,
        assessments: Sequence[AssessmentResult] | None = None,
    ) -> RecruitmentReport:
        """Generate (or return the existing) report for a window.

        Args:
            report_type: Report cadence
            start: Window start (inclusive)
            end: Window end (exclusive)
            title: Custom title (default "{Type} Talent Report")
            assessments: Assessments to summarize (default: read from the assessment source)

        Returns:
            The stored report
        """
        # Naive bounds are taken as UTC
        start = start if start.tzinfo else start.replace(tzinfo=UTC)
        end = end if end.tzinfo else end.replace(tzinfo=UTC)
        if end <= start:
            raise ValueError("Report window end must be after start")

        async with self._generate_lock:
            existing = await self._find(report_type, start, end)
            if existing is not None:
                logger.info("report_reused", report_id=existing.id, report_type=report_type.value)
                return existing
            report = await self._build(report_type, start, end, title, assessments)
            await self._reports.upsert(report)

        logger.info(
            "report_generated",
            report_id=report.id,
            report_type=report_type.value,
            alerts=report.summary.alerts_triggered,
            new_talents=report.summary.new_talents_identified,
        )
        return report

    async def _build(
        self,
        report_type: ReportType,
        start: datetime,
        end: datetime,
        title: str | None,
        assessments: Sequence[AssessmentResult] | None,
    ) -> RecruitmentReport:
        alerts = await self._dispatcher.list_in_window(start, end)
        if assessments is None and self._assessment_source is not None:
            assessments = await self._assessment_source.list_assessments_in_window(start, end)
        window_assessments = [a for a in assessments or () if start <= a.timestamp < end]

        summary = self._summarize(alerts, window_assessments)
        return RecruitmentReport(
            title=title or f"{report_type.value.capitalize()} Talent Report",
            type=report_type,
            period=ReportPeriod(start=start, end=end),
            summary=summary,
            insights=ReportInsights(
                top_talents=self._top_talents(alerts),
                trend_analysis=self._trend_analysis(summary, alerts, start, end),
                recommendations=self._recommendations(summary, alerts),
                risk_factors=self._risk_factors(summary),
            ),
            actions=self._actions(alerts),
        )

    async def generate_daily(self, day: date, **kwargs) -> RecruitmentReport:
        start, end = daily_window(day)
        return await self.generate(ReportType.DAILY, start, end, **kwargs)

    async def generate_weekly(self, day: date, **kwargs) -> RecruitmentReport:
        start, end = weekly_window(day)
        return await self.generate(ReportType.WEEKLY, start, end, **kwargs)

    async def generate_monthly(self, year: int, month: int, **kwargs) -> RecruitmentReport:
        start, end = monthly_window(year, month)
        return await self.generate(ReportType.MONTHLY, start, end, **kwargs)

    async def generate_custom(
        self,
        start: datetime,
        end: datetime,
        title: str,
        report_type: ReportType = ReportType.QUARTERLY,
        **kwargs,
    ) -> RecruitmentReport:
        return await self.generate(report_type, start, end, title=title, **kwargs)

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    async def list_reports(self, limit: int = 50) -> list[RecruitmentReport]:
        """Stored reports, newest first."""
        reports = await self._reports.list_all()
        reports.reverse()
        reports.sort(key=lambda r: r.generated_at, reverse=True)
        return reports[:limit]

    async def get_report(self, report_id: str) -> RecruitmentReport:
        """Fetch a stored report.

        Raises:
            NotFoundError: If no such report is stored
        """
        report = await self._reports.get(report_id)
        if report is None:
            raise NotFoundError("report", report_id)
        return report

    async def _find(self, report_type: ReportType, start: datetime, end: datetime) -> RecruitmentReport | None:
        for report in await self._reports.list_all():
            if report.type == report_type and report.period.start == start and report.period.end == end:
                return report
        return None

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def _summarize(self, alerts: list[Alert], assessments: list[AssessmentResult]) -> ReportSummary:
        talent_subjects = {a.subject_id for a in alerts if a.type in TALENT_ALERT_TYPES}

        average = statistics.fmean(a.score for a in assessments) if assessments else 0.0

        return ReportSummary(
            new_talents_identified=len(talent_subjects),
            total_assessments=len(assessments),
            average_score=round(average, 2),
            regional_breakdown=dict(Counter(_region(a) for a in alerts)),
            sport_breakdown=dict(Counter(_sport(a) for a in alerts)),
            alerts_triggered=len(alerts),
        )

    def _top_talents(self, alerts: list[Alert]) -> list[TopTalent]:
        best: dict[str, TopTalent] = {}
        for alert in alerts:
            if alert.type not in TALENT_ALERT_TYPES:
                continue
            score = alert.payload.current_score or 0.0
            current = best.get(alert.subject_id)
            if current is None or score > current.score:
                best[alert.subject_id] = TopTalent(
                    subject_id=alert.subject_id,
                    name=alert.subject_name,
                    score=score,
                    sport=_sport(alert),
                    location=alert.payload.location or "Unknown",
                )
        ranked = sorted(best.values(), key=lambda t: t.score, reverse=True)
        return ranked[:MAX_TOP_TALENTS]

    def _trend_analysis(
        self,
        summary: ReportSummary,
        alerts: list[Alert],
        start: datetime,
        end: datetime,
    ) -> TrendAnalysis:
        """Score trend from the average; region and sport trends compare the window's halves."""
        if summary.average_score > 75:
            score_trend = Trend.IMPROVING
        elif summary.average_score > 65:
            score_trend = Trend.STABLE
        else:
            score_trend = Trend.DECLINING

        midpoint = start + (end - start) / 2
        first_half = [a for a in alerts if a.timestamp < midpoint]
        second_half = [a for a in alerts if a.timestamp >= midpoint]

        first_regions = Counter(_region(a) for a in first_half)
        second_regions = Counter(_region(a) for a in second_half)
        first_sports = Counter(_sport(a) for a in first_half)
        second_sports = Counter(_sport(a) for a in second_half)

        return TrendAnalysis(
            score_trend=score_trend,
            regional_trends={
                r: _direction(first_regions[r], second_regions[r]) for r in summary.regional_breakdown
            },
            sport_trends={s: _direction(first_sports[s], second_sports[s]) for s in summary.sport_breakdown},
        )

    def _recommendations(self, summary: ReportSummary, alerts: list[Alert]) -> list[str]:
        recommendations: list[str] = []
        if summary.new_talents_identified < 10:
            recommendations.append("Increase talent scouting activities in underperforming regions")
        if summary.average_score < 70:
            recommendations.append("Review assessment criteria and training programs")
        if sum(1 for a in alerts if a.priority == Priority.HIGH) > 5:
            recommendations.append("Allocate additional resources for high-priority talent development")

        if summary.regional_breakdown:
            top_region = max(summary.regional_breakdown.items(), key=lambda item: item[1])[0]
            recommendations.append(f"Focus recruitment efforts in {top_region} - showing strong talent pipeline")
        return recommendations

    def _risk_factors(self, summary: ReportSummary) -> list[str]:
        risks: list[str] = []
        if summary.new_talents_identified < 5:
            risks.append("Low talent identification rate may indicate assessment gaps")
        if summary.alerts_triggered > summary.new_talents_identified * 3:
            risks.append("High alert volume may indicate threshold misconfiguration")

        low_regions = [r for r, count in summary.regional_breakdown.items() if count < LOW_REGION_COUNT]
        if len(low_regions) > 2:
            risks.append(f"Underperformance in regions: {', '.join(low_regions)}")
        return risks

    def _actions(self, alerts: list[Alert]) -> ReportActions:
        high = [a for a in alerts if a.priority == Priority.HIGH]
        medium = [a for a in alerts if a.priority == Priority.MEDIUM]
        return ReportActions(
            immediate=[
                *(f"Follow up on {a.subject_name} - {a.title}" for a in high[:3]),
                "Review and respond to all high-priority alerts",
            ],
            short_term=[
                *(f"Evaluate {a.subject_name} for training programs" for a in medium[:2]),
                "Analyze regional performance variations",
                "Update recruitment criteria based on trends",
            ],
            long_term=list(LONG_TERM_ACTIONS),
        )
