"""Talent profile aggregation across a subject's assessments."""

import statistics
from collections import defaultdict
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from talentwatch.core.logging import get_logger
from talentwatch.scoring.engine import percentile_for_score, rating_for_score
from talentwatch.scoring.types import ScoreProfile
from talentwatch.subjects import AssessmentResult, SubjectProfile, TestType

logger = get_logger(__name__)

SPORT_WEIGHTS: dict[str, dict[TestType, float]] = {
    "athletics": {
        TestType.SPEED: 0.35,
        TestType.ENDURANCE: 0.30,
        TestType.STRENGTH: 0.20,
        TestType.AGILITY: 0.10,
        TestType.FLEXIBILITY: 0.05,
    },
    "football": {
        TestType.AGILITY: 0.30,
        TestType.SPEED: 0.25,
        TestType.ENDURANCE: 0.20,
        TestType.STRENGTH: 0.15,
        TestType.BALANCE: 0.10,
    },
    "basketball": {
        TestType.AGILITY: 0.30,
        TestType.SPEED: 0.20,
        TestType.STRENGTH: 0.20,
        TestType.BALANCE: 0.15,
        TestType.ENDURANCE: 0.15,
    },
    "hockey": {
        TestType.AGILITY: 0.25,
        TestType.SPEED: 0.25,
        TestType.ENDURANCE: 0.20,
        TestType.STRENGTH: 0.15,
        TestType.BALANCE: 0.15,
    },
    "wrestling": {
        TestType.STRENGTH: 0.35,
        TestType.AGILITY: 0.25,
        TestType.ENDURANCE: 0.20,
        TestType.BALANCE: 0.15,
        TestType.FLEXIBILITY: 0.05,
    },
    "badminton": {
        TestType.AGILITY: 0.35,
        TestType.SPEED: 0.25,
        TestType.BALANCE: 0.20,
        TestType.ENDURANCE: 0.15,
        TestType.FLEXIBILITY: 0.05,
    },
}

PHYSICAL_TESTS = (TestType.SPEED, TestType.STRENGTH, TestType.ENDURANCE)
TECHNICAL_TESTS = (TestType.AGILITY, TestType.BALANCE, TestType.FLEXIBILITY)

RECENT_WINDOW = timedelta(days=60)
CONFIDENCE_WINDOW = timedelta(days=90)


def _mean(values: Sequence[float]) -> float:
    return statistics.fmean(values) if values else 0.0


def coefficient_of_variation(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = statistics.fmean(values)
    return 0.0 if mean == 0 else statistics.pstdev(values) / mean


def improvement_ratio(values: Sequence[float]) -> float:
    """Share of consecutive steps that improved, on a 0-100 scale (50 if unknown)."""
    if len(values) < 2:
        return 50.0
    improvements = sum(1 for prev, cur in zip(values, values[1:]) if cur > prev)
    return improvements / (len(values) - 1) * 100


def age_bonus(age: int) -> int:
    if 16 <= age <= 20:
        return 5
    if 14 <= age <= 23:
        return 3
    if 21 <= age <= 25:
        return 1
    return 0


class TalentScorer:
    """Builds ScoreProfiles from assessment history."""

    def build_profile(
        self,
        subject: SubjectProfile,
        assessments: Sequence[AssessmentResult],
        now: datetime | None = None,
    ) -> ScoreProfile:
        """Aggregate a subject's assessments into a ScoreProfile.

        Raises:
            ValueError: If no assessments are given
        """
        if not assessments:
            raise ValueError(f"No assessments available for subject {subject.subject_id}")

        now = now or datetime.now(UTC)
        category_scores = self.category_scores(assessments, now)
        sport_scores = self.sport_scores(subject.sports, assessments)

        category_average = _mean(list(category_scores.values()))
        best_sport = max([0.0, *sport_scores.values()])
        overall = round(category_average * 0.6 + best_sport * 0.3 + age_bonus(subject.age) * 0.1, 2)

        profile = ScoreProfile(
            subject_id=subject.subject_id,
            overall_score=min(100.0, max(0.0, overall)),
            category_scores=category_scores,
            rating=rating_for_score(overall),
            percentile=max(percentile_for_score(a.score, a.test_type) for a in assessments),
            recommended_sports=self.recommend_sports(assessments),
            sport_scores=sport_scores,
            strengths=self.strengths(assessments),
            risk_factors=self.risk_factors(subject, assessments),
            confidence=self.confidence(assessments, now),
        )
        logger.debug(
            "score_profile_built",
            subject_id=subject.subject_id,
            overall_score=profile.overall_score,
            assessments=len(assessments),
        )
        return profile

    def category_scores(
        self,
        assessments: Sequence[AssessmentResult],
        now: datetime,
    ) -> dict[str, float]:
        chronological = sorted(assessments, key=lambda a: a.timestamp)
        scores = [a.score for a in chronological]

        consistency = 100 - coefficient_of_variation(scores) * 100
        mental = max(0.0, min(100.0, consistency * 0.6 + improvement_ratio(scores) * 0.4))

        historical = _mean(scores)
        recent = [a.score for a in chronological if now - a.timestamp < RECENT_WINDOW]
        if recent and historical > 0:
            potential = min(100.0, historical * max(1.0, _mean(recent) / historical))
        else:
            potential = historical

        return {
            "physical": _mean([a.score for a in assessments if a.test_type in PHYSICAL_TESTS]),
            "technical": _mean([a.score for a in assessments if a.test_type in TECHNICAL_TESTS]),
            "mental": mental,
            "potential": potential,
        }

    def sport_scores(
        self,
        sports: Sequence[str],
        assessments: Sequence[AssessmentResult],
    ) -> dict[str, float]:
        """Weighted average per declared sport over the types that were assessed."""
        by_type: dict[TestType, list[int]] = defaultdict(list)
        for assessment in assessments:
            by_type[assessment.test_type].append(assessment.score)

        scores: dict[str, float] = {}
        for sport in sports:
            weights = SPORT_WEIGHTS.get(sport.lower(), SPORT_WEIGHTS["athletics"])
            weighted = 0.0
            total_weight = 0.0
            for test_type, weight in weights.items():
                if by_type.get(test_type):
                    weighted += _mean(by_type[test_type]) * weight
                    total_weight += weight
            scores[sport] = weighted / total_weight if total_weight else 0.0
        return scores

    def recommend_sports(self, assessments: Sequence[AssessmentResult], limit: int = 3) -> list[str]:
        """Top sports by weighted best score per test type."""
        best: dict[TestType, int] = {}
        for assessment in assessments:
            best[assessment.test_type] = max(best.get(assessment.test_type, 0), assessment.score)

        ranked = sorted(
            (
                (sum(best.get(t, 0) * w for t, w in weights.items()) / sum(weights.values()), sport)
                for sport, weights in SPORT_WEIGHTS.items()
            ),
            key=lambda pair: pair[0],
            reverse=True,
        )
        return [sport.capitalize() for _, sport in ranked[:limit]]

    def strengths(self, assessments: Sequence[AssessmentResult]) -> list[str]:
        by_type: dict[TestType, list[int]] = defaultdict(list)
        for assessment in assessments:
            by_type[assessment.test_type].append(assessment.score)
        return [t.value for t, scores in by_type.items() if _mean(scores) >= 80]

    def risk_factors(
        self,
        subject: SubjectProfile,
        assessments: Sequence[AssessmentResult],
    ) -> list[str]:
        risks: list[str] = []
        if subject.age > 24:
            risks.append("Advanced age for talent development")
        if subject.age < 14:
            risks.append("Very young - needs careful development")
        if coefficient_of_variation([a.score for a in assessments]) > 0.2:
            risks.append("Inconsistent performance")
        if len(subject.sports) > 3:
            risks.append("Over-diversified - may need sport focus")
        if len(subject.sports) == 1 and subject.age < 16:
            risks.append("Early specialization risk")
        if len({a.test_type for a in assessments}) < 3:
            risks.append("Insufficient assessment coverage")
        return risks

    def confidence(self, assessments: Sequence[AssessmentResult], now: datetime) -> float:
        recent = [a for a in assessments if now - a.timestamp < CONFIDENCE_WINDOW]
        value = 0.5 + min(len(assessments) * 0.1, 0.3) + min(len(recent) * 0.05, 0.2)
        return round(min(value, 1.0), 2)
