"""End-to-end processing of a new assessment.

Flow:
1. Load the assessment, the subject profile and the subject's history
2. Score the assessment and rebuild the subject's ScoreProfile
3. Validate access for the stated purpose
4. Anonymize when full detail is denied but performance analytics is permitted
5. Evaluate notification rules (new assessment, improvement, elite threshold)
"""

from dataclasses import dataclass, field
from typing import Any

from talentwatch.compliance.access import AccessValidator
from talentwatch.compliance.anonymizer import AnonymizedRecord, Anonymizer
from talentwatch.core.audit import SYSTEM_ACTOR
from talentwatch.core.exceptions import NotFoundError
from talentwatch.core.logging import LogContext, get_logger
from talentwatch.notifications.rules import ELITE_THRESHOLD, NotificationRuleEngine
from talentwatch.notifications.types import Alert
from talentwatch.scoring.engine import ScoringEngine, previous_same_type
from talentwatch.scoring.talent import TalentScorer
from talentwatch.scoring.types import AssessmentAnalysis, ScoreProfile
from talentwatch.subjects import AssessmentResult, AssessmentSource, ProfileSource, SubjectProfile

logger = get_logger(__name__)

DEFAULT_PURPOSE = "assessment_analysis"
ANALYTICS_PURPOSE = "performance_analytics"


@dataclass
class PipelineResult:
    """Everything produced while processing one assessment."""

    assessment: AssessmentResult
    subject: SubjectProfile
    analysis: AssessmentAnalysis
    profile: ScoreProfile
    access_allowed: bool
    denial_reason: str | None = None
    anonymized: AnonymizedRecord | None = None
    alerts: list[Alert] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "assessment_id": self.assessment.assessment_id,
            "subject_id": self.subject.subject_id,
            "analysis": self.analysis.model_dump(mode="json"),
            "profile": self.profile.model_dump(mode="json"),
            "access_allowed": self.access_allowed,
            "denial_reason": self.denial_reason,
            "anonymized": self.anonymized.model_dump(mode="json") if self.anonymized else None,
            "alerts": [a.model_dump(mode="json") for a in self.alerts],
        }


class TalentPipeline:
    """Runs a new assessment through scoring, consent, anonymization and alerting."""

    def __init__(
        self,
        assessments: AssessmentSource,
        profiles: ProfileSource,
        scoring: ScoringEngine,
        talent_scorer: TalentScorer,
        validator: AccessValidator,
        anonymizer: Anonymizer,
        rule_engine: NotificationRuleEngine,
        analytics_fail_open: bool = False,
    ):
        self._assessments = assessments
        self._profiles = profiles
        self._scoring = scoring
        self._talent = talent_scorer
        self._validator = validator
        self._anonymizer = anonymizer
        self._rules = rule_engine
        self._fail_open = analytics_fail_open

    async def process_assessment(
        self,
        assessment_id: str,
        actor_id: str = SYSTEM_ACTOR,
        purpose: str = DEFAULT_PURPOSE,
    ) -> PipelineResult:
        """Process a newly recorded assessment.

        Args:
            assessment_id: Assessment to process
            actor_id: Who triggered processing
            purpose: Purpose the full detail is requested for

        Returns:
            PipelineResult with the analysis, profile, access outcome and alerts

        Raises:
            NotFoundError: If the assessment or its subject is unknown
        """
        assessment = await self._assessments.get_assessment_by_id(assessment_id)
        if assessment is None:
            raise NotFoundError("assessment", assessment_id)
        subject = await self._profiles.get_subject_by_id(assessment.subject_id)
        if subject is None:
            raise NotFoundError("subject", assessment.subject_id)

        with LogContext(assessment_id=assessment_id, subject_id=subject.subject_id):
            history = await self._assessments.get_subject_assessments(subject.subject_id)
            if all(a.assessment_id != assessment_id for a in history):
                history = [*history, assessment]
            prior_history = [a for a in history if a.assessment_id != assessment_id]

            analysis = self._scoring.evaluate(assessment, history, subject.sports)
            profile = self._talent.build_profile(subject, history)

            decision = await self._validator.validate(actor_id, [subject.subject_id], purpose)
            result = PipelineResult(
                assessment=assessment,
                subject=subject,
                analysis=analysis,
                profile=profile,
                access_allowed=decision.is_allowed(subject.subject_id),
                denial_reason=decision.reasons.get(subject.subject_id),
            )

            if not result.access_allowed and await self._validator.permits(
                subject.subject_id, ANALYTICS_PURPOSE, fail_open=self._fail_open
            ):
                result.anonymized = await self._anonymizer.anonymize(subject, history, actor_id=actor_id)

            result.alerts.extend(await self._rules.process_new_assessment(subject, assessment, profile))

            previous = previous_same_type(assessment, prior_history)
            if previous is not None:
                result.alerts.extend(
                    await self._rules.process_score_improvement(subject, previous.score, assessment.score, profile)
                )

            previous_profile = self._talent.build_profile(subject, prior_history) if prior_history else None
            if profile.overall_score >= ELITE_THRESHOLD and (
                previous_profile is None or previous_profile.overall_score < ELITE_THRESHOLD
            ):
                result.alerts.extend(await self._rules.process_elite_threshold(subject, profile))

            logger.info(
                "assessment_processed",
                overall_score=profile.overall_score,
                access_allowed=result.access_allowed,
                anonymized=result.anonymized is not None,
                alerts=len(result.alerts),
            )
        return result
