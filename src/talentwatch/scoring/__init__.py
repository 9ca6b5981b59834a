"""Assessment scoring and talent profiling."""

from talentwatch.scoring.benchmarks import (
    ELITE_LEVELS,
    PEER_BASELINES,
    NoiseSource,
    UniformNoise,
    ZeroNoise,
    compare_to_benchmarks,
    create_noise_source,
)
from talentwatch.scoring.engine import (
    PERCENTILE_MULTIPLIERS,
    ScoringEngine,
    percentile_for_score,
    rating_for_score,
)
from talentwatch.scoring.talent import SPORT_WEIGHTS, TalentScorer
from talentwatch.scoring.types import (
    AssessmentAnalysis,
    BenchmarkComparison,
    Insight,
    InsightCategory,
    PerformanceMetrics,
    Priority,
    ProgressTracking,
    Rating,
    RecommendationCategory,
    ScoreProfile,
    TrainingRecommendation,
    Trend,
)

__all__ = [
    # Engine
    "PERCENTILE_MULTIPLIERS",
    "ScoringEngine",
    "percentile_for_score",
    "rating_for_score",
    # Benchmarks
    "ELITE_LEVELS",
    "PEER_BASELINES",
    "NoiseSource",
    "UniformNoise",
    "ZeroNoise",
    "compare_to_benchmarks",
    "create_noise_source",
    # Talent profiles
    "SPORT_WEIGHTS",
    "TalentScorer",
    # Types
    "AssessmentAnalysis",
    "BenchmarkComparison",
    "Insight",
    "InsightCategory",
    "PerformanceMetrics",
    "Priority",
    "ProgressTracking",
    "Rating",
    "RecommendationCategory",
    "ScoreProfile",
    "TrainingRecommendation",
    "Trend",
]
