"""Assessment scoring engine.

Turns one assessment plus the subject's history into insights, metrics,
training recommendations, progress tracking and a benchmark comparison.
The engine holds no state beyond its noise source.
"""

from collections.abc import Sequence

from talentwatch.core.logging import get_logger
from talentwatch.scoring.benchmarks import NoiseSource, ZeroNoise, compare_to_benchmarks
from talentwatch.scoring.types import (
    AssessmentAnalysis,
    Insight,
    InsightCategory,
    PerformanceMetrics,
    Priority,
    ProgressTracking,
    Rating,
    RecommendationCategory,
    TrainingRecommendation,
    Trend,
)
from talentwatch.subjects import AssessmentResult, TestType

logger = get_logger(__name__)


# =============================================================================
# Reference Tables
# =============================================================================

PERCENTILE_MULTIPLIERS: dict[TestType, float] = {
    TestType.SPEED: 1.1,
    TestType.AGILITY: 1.0,
    TestType.STRENGTH: 0.95,
    TestType.ENDURANCE: 1.05,
    TestType.FLEXIBILITY: 0.9,
    TestType.BALANCE: 1.0,
}

# Recommendation bundle emitted when a score falls below the type's threshold
RECOMMENDATION_RULES: dict[TestType, tuple[int, TrainingRecommendation]] = {
    TestType.SPEED: (
        70,
        TrainingRecommendation(
            category=RecommendationCategory.STRENGTH,
            title="Sprint Power Development",
            description="Focus on explosive power and acceleration techniques",
            exercises=[
                "20m Sprint Intervals",
                "Box Jumps (3x8)",
                "Resistance Band Sprints",
                "Hill Sprints (6x30s)",
            ],
            priority=Priority.HIGH,
            duration="3-4 weeks",
        ),
    ),
    TestType.AGILITY: (
        65,
        TrainingRecommendation(
            category=RecommendationCategory.TECHNIQUE,
            title="Agility Enhancement Program",
            description="Improve directional changes and reaction time",
            exercises=[
                "Cone Drills (T-Test, 5-10-5)",
                "Ladder Drills (20 minutes)",
                "Reaction Ball Training",
                "Plyometric Jumps",
            ],
            priority=Priority.HIGH,
            duration="4-6 weeks",
        ),
    ),
    TestType.STRENGTH: (
        60,
        TrainingRecommendation(
            category=RecommendationCategory.STRENGTH,
            title="Strength Building Protocol",
            description="Progressive overload program for muscle development",
            exercises=[
                "Compound Lifts (Squats, Deadlifts)",
                "Progressive Weight Training",
                "Functional Movement Patterns",
                "Core Stabilization",
            ],
            priority=Priority.HIGH,
            duration="6-8 weeks",
        ),
    ),
    TestType.ENDURANCE: (
        65,
        TrainingRecommendation(
            category=RecommendationCategory.ENDURANCE,
            title="Cardiovascular Conditioning",
            description="Improve aerobic capacity and stamina",
            exercises=[
                "Interval Running (30/30s)",
                "Long Steady Runs (45-60min)",
                "Cycling Cross-Training",
                "Swimming Sessions",
            ],
            priority=Priority.MEDIUM,
            duration="6-8 weeks",
        ),
    ),
    TestType.FLEXIBILITY: (
        60,
        TrainingRecommendation(
            category=RecommendationCategory.FLEXIBILITY,
            title="Mobility Enhancement",
            description="Daily stretching and mobility work",
            exercises=[
                "Dynamic Warm-up (10 minutes)",
                "Static Stretching (15 minutes)",
                "Foam Rolling (10 minutes)",
                "Yoga Sessions (2x/week)",
            ],
            priority=Priority.HIGH,
            duration="4-6 weeks",
        ),
    ),
    TestType.BALANCE: (
        65,
        TrainingRecommendation(
            category=RecommendationCategory.TECHNIQUE,
            title="Balance and Stability Training",
            description="Improve proprioception and stability",
            exercises=[
                "Single-leg Stands (3x30s)",
                "Balance Board Training",
                "Bosu Ball Exercises",
                "Stability Ball Workouts",
            ],
            priority=Priority.MEDIUM,
            duration="3-4 weeks",
        ),
    ),
}

MAINTENANCE_THRESHOLD = 80
MAINTENANCE_RECOMMENDATION = TrainingRecommendation(
    category=RecommendationCategory.RECOVERY,
    title="Performance Maintenance",
    description="Maintain current level with recovery-focused training",
    exercises=[
        "Active Recovery Sessions",
        "Maintenance Training (2x/week)",
        "Sleep Optimization",
        "Nutrition Planning",
    ],
    priority=Priority.MEDIUM,
    duration="Ongoing",
)

PROGRESS_INSIGHT_DELTA = 5
TREND_DELTA = 3


# =============================================================================
# Pure Scoring Functions
# =============================================================================


def rating_for_score(score: float) -> Rating:
    if score >= 90:
        return Rating.EXCELLENT
    if score >= 75:
        return Rating.GOOD
    if score >= 60:
        return Rating.AVERAGE
    if score >= 45:
        return Rating.BELOW_AVERAGE
    return Rating.POOR


def percentile_for_score(score: float, test_type: TestType) -> int:
    """Test-type-weighted percentile of a raw score.

    The score is clamped to [5, 95] before weighting.
    """
    clamped = min(95, max(5, score))
    return round(clamped * PERCENTILE_MULTIPLIERS[test_type])


def previous_same_type(
    assessment: AssessmentResult,
    history: Sequence[AssessmentResult],
) -> AssessmentResult | None:
    """Most recent prior assessment of the same test type, if any.

    Assessments recorded after ``assessment`` are ignored.
    """
    candidates = [
        a
        for a in history
        if a.test_type == assessment.test_type
        and a.assessment_id != assessment.assessment_id
        and a.timestamp <= assessment.timestamp
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda a: a.timestamp)


def trend_for_delta(delta: float) -> Trend:
    if delta > TREND_DELTA:
        return Trend.IMPROVING
    if delta < -TREND_DELTA:
        return Trend.DECLINING
    return Trend.STABLE


class ScoringEngine:
    """Evaluates assessments against fixed scoring tables."""

    def __init__(self, noise: NoiseSource | None = None):
        """Initialize the engine.

        Args:
            noise: Benchmark jitter source (no jitter when omitted)
        """
        self.noise = noise or ZeroNoise()

    def evaluate(
        self,
        assessment: AssessmentResult,
        history: Sequence[AssessmentResult] = (),
        sport_categories: Sequence[str] = (),
    ) -> AssessmentAnalysis:
        """Score an assessment.

        Args:
            assessment: The assessment being evaluated
            history: Other assessments of the same subject (may include this one)
            sport_categories: Subject's sports

        Returns:
            AssessmentAnalysis with insights, metrics, recommendations,
            progress and benchmark
        """
        previous = previous_same_type(assessment, history)
        analysis = AssessmentAnalysis(
            insights=self.generate_insights(assessment, previous),
            metrics=self.build_metrics(assessment),
            recommendations=self.generate_recommendations(assessment),
            progress=self.track_progress(assessment, previous),
            benchmark=compare_to_benchmarks(assessment.test_type, self.noise),
        )
        logger.debug(
            "assessment_evaluated",
            assessment_id=assessment.assessment_id,
            test_type=assessment.test_type.value,
            score=assessment.score,
            rating=analysis.metrics.rating.value,
            sports=list(sport_categories),
        )
        return analysis

    def generate_insights(
        self,
        assessment: AssessmentResult,
        previous: AssessmentResult | None = None,
    ) -> list[Insight]:
        score = assessment.score
        test_name = assessment.test_type.value
        insights: list[Insight] = []

        if score >= 85:
            insights.append(
                Insight(
                    category=InsightCategory.STRENGTH,
                    title="Exceptional Performance",
                    description=f"Outstanding {test_name} performance! You're in the top 15% of athletes.",
                    priority=Priority.HIGH,
                )
            )
        elif score >= 70:
            insights.append(
                Insight(
                    category=InsightCategory.STRENGTH,
                    title="Strong Performance",
                    description=f"Good {test_name} results. You're performing above average.",
                    priority=Priority.MEDIUM,
                )
            )
        elif score < 50:
            insights.append(
                Insight(
                    category=InsightCategory.WEAKNESS,
                    title="Area for Improvement",
                    description=f"Your {test_name} needs attention. Focus on targeted training.",
                    priority=Priority.HIGH,
                )
            )

        match assessment.test_type:
            case TestType.SPEED if score < 60:
                insights.append(
                    Insight(
                        category=InsightCategory.IMPROVEMENT,
                        title="Speed Development Opportunity",
                        description="Consider sprint intervals and explosive power training to improve acceleration.",
                        priority=Priority.HIGH,
                    )
                )
            case TestType.FLEXIBILITY if score < 55:
                insights.append(
                    Insight(
                        category=InsightCategory.RISK,
                        title="Injury Prevention Focus",
                        description="Limited flexibility may increase injury risk. Daily stretching is recommended.",
                        priority=Priority.HIGH,
                    )
                )
            case TestType.ENDURANCE if score >= 80:
                insights.append(
                    Insight(
                        category=InsightCategory.STRENGTH,
                        title="Excellent Cardiovascular Fitness",
                        description="Your endurance levels are exceptional. Consider competing in longer events.",
                        priority=Priority.MEDIUM,
                    )
                )

        if previous is not None:
            delta = score - previous.score
            if delta > PROGRESS_INSIGHT_DELTA:
                insights.append(
                    Insight(
                        category=InsightCategory.IMPROVEMENT,
                        title="Positive Progress",
                        description=f"You've improved by {delta:.1f} points since your last test!",
                        priority=Priority.MEDIUM,
                    )
                )
            elif delta < -PROGRESS_INSIGHT_DELTA:
                insights.append(
                    Insight(
                        category=InsightCategory.WEAKNESS,
                        title="Performance Decline",
                        description=f"Performance has decreased by {abs(delta):.1f} points. Review training program.",
                        priority=Priority.HIGH,
                    )
                )

        return insights

    def generate_recommendations(self, assessment: AssessmentResult) -> list[TrainingRecommendation]:
        recommendations: list[TrainingRecommendation] = []
        threshold, bundle = RECOMMENDATION_RULES[assessment.test_type]
        if assessment.score < threshold:
            recommendations.append(bundle.model_copy(deep=True))
        if assessment.score >= MAINTENANCE_THRESHOLD:
            recommendations.append(MAINTENANCE_RECOMMENDATION.model_copy(deep=True))
        return recommendations

    def build_metrics(self, assessment: AssessmentResult) -> PerformanceMetrics:
        score = assessment.score
        test_name = assessment.test_type.value

        strengths: list[str] = []
        if score >= 80:
            strengths += [f"Excellent {test_name} performance", "Consistent technique"]
        if score >= 85:
            strengths += ["Elite-level capability", "Competition readiness"]

        weaknesses: list[str] = []
        if score < 60:
            weaknesses.append(f"Below average {test_name}")
        if score < 50:
            weaknesses += ["Needs significant improvement", "May limit overall performance"]

        risks: list[str] = []
        if assessment.test_type == TestType.FLEXIBILITY and score < 50:
            risks += ["Increased injury risk", "Limited range of motion"]
        if assessment.test_type == TestType.BALANCE and score < 55:
            risks.append("Fall risk during activities")
        if score < 40:
            risks.append("Performance limitations")

        return PerformanceMetrics(
            rating=rating_for_score(score),
            percentile=percentile_for_score(score, assessment.test_type),
            strengths=strengths,
            weaknesses=weaknesses,
            risk_factors=risks,
        )

    def track_progress(
        self,
        assessment: AssessmentResult,
        previous: AssessmentResult | None,
    ) -> ProgressTracking:
        if previous is None:
            return ProgressTracking(current_score=assessment.score)
        delta = assessment.score - previous.score
        return ProgressTracking(
            current_score=assessment.score,
            previous_score=previous.score,
            improvement=delta,
            trend=trend_for_delta(delta),
        )
