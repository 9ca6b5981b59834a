"""Type definitions for assessment scoring.

Classes:
    Rating: Performance rating bands
    Priority: Priority levels shared by insights, recommendations and alerts
    InsightCategory: Kinds of insight
    RecommendationCategory: Kinds of training recommendation
    Trend: Direction of change between assessments
    Insight: A single scored observation
    TrainingRecommendation: A training bundle with exercises
    PerformanceMetrics: Rating, percentile and qualitative lists
    ProgressTracking: Change versus the previous same-type assessment
    BenchmarkComparison: Peer, sport and elite reference levels
    AssessmentAnalysis: Full output of ScoringEngine.evaluate
    ScoreProfile: Aggregated talent profile across assessments
"""

from enum import Enum

from pydantic import BaseModel, Field


class Rating(str, Enum):
    """Performance rating bands."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


class Priority(str, Enum):
    """Priority levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightCategory(str, Enum):
    STRENGTH = "strength"
    WEAKNESS = "weakness"
    IMPROVEMENT = "improvement"
    RISK = "risk"


class RecommendationCategory(str, Enum):
    STRENGTH = "strength"
    FLEXIBILITY = "flexibility"
    ENDURANCE = "endurance"
    TECHNIQUE = "technique"
    RECOVERY = "recovery"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class Insight(BaseModel):
    category: InsightCategory
    title: str
    description: str
    priority: Priority


class TrainingRecommendation(BaseModel):
    category: RecommendationCategory
    title: str
    description: str
    exercises: list[str]
    priority: Priority
    duration: str


class PerformanceMetrics(BaseModel):
    rating: Rating
    percentile: int
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class ProgressTracking(BaseModel):
    current_score: int
    previous_score: int | None = None
    improvement: int = 0
    trend: Trend = Trend.STABLE


class BenchmarkComparison(BaseModel):
    peer_average: float
    sport_average: float
    elite_level: float


class AssessmentAnalysis(BaseModel):
    """Output of scoring a single assessment."""

    insights: list[Insight]
    metrics: PerformanceMetrics
    recommendations: list[TrainingRecommendation]
    progress: ProgressTracking
    benchmark: BenchmarkComparison


class ScoreProfile(BaseModel):
    """Aggregated talent profile for a subject."""

    subject_id: str
    overall_score: float = Field(ge=0, le=100)
    category_scores: dict[str, float] = Field(default_factory=dict)
    rating: Rating
    percentile: int = 0
    recommended_sports: list[str] = Field(default_factory=list)
    sport_scores: dict[str, float] = Field(default_factory=dict)
    strengths: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0, le=1)
