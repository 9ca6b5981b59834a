"""Notification rules and their evaluation against scoring events.

Classes:
    RuleStore: Persistent rule configuration with built-in defaults
    NotificationRuleEngine: Turns scoring events into delivered alerts
"""

from collections.abc import Callable
from typing import Any

from talentwatch.compliance.consent import ConsentScope, ConsentStore
from talentwatch.core.exceptions import NotFoundError
from talentwatch.core.logging import get_logger
from talentwatch.notifications.dispatcher import AlertDispatcher
from talentwatch.notifications.types import (
    Alert,
    AlertPayload,
    AlertType,
    NotificationRule,
    RuleConditions,
    RuleFrequency,
    RuleRecipients,
)
from talentwatch.scoring.types import Priority, ScoreProfile
from talentwatch.storage.base import BlobStore
from talentwatch.storage.repository import KeyedRepository
from talentwatch.subjects import AssessmentResult, SubjectProfile

logger = get_logger(__name__)


# =============================================================================
# Thresholds and Action Items
# =============================================================================

ELITE_THRESHOLD = 85
NEW_TALENT_ACTION_SCORE = 80
IMPROVEMENT_ACTION_PERCENT = 25

NEW_TALENT_ACTIONS = [
    "Review detailed assessment results",
    "Schedule talent scout evaluation",
    "Consider for training program",
]
MONITOR_ACTIONS = ["Monitor for future assessments"]
IMPROVEMENT_ACTIONS = [
    "Schedule follow-up assessment",
    "Consider for advanced training program",
    "Update talent profile",
]
ELITE_ACTIONS = [
    "Immediate talent scout assignment",
    "Schedule comprehensive evaluation",
    "Add to priority recruitment list",
    "Contact athlete for program enrollment",
]


def default_rules() -> list[NotificationRule]:
    """Rules installed when no rule configuration exists."""
    return [
        NotificationRule(
            id="default_elite",
            name="Elite Threshold Alert",
            description="Notify when athletes reach elite performance levels (85+ score)",
            conditions=RuleConditions(min_score=85, elite_threshold_alert=True),
            recipients=RuleRecipients(officials=["sai_official_1"], email_addresses=["talent@sai.gov.in"]),
            frequency=RuleFrequency.IMMEDIATE,
            priority=Priority.HIGH,
        ),
        NotificationRule(
            id="default_improvement",
            name="Significant Improvement",
            description="Notify when athletes show 20%+ improvement",
            conditions=RuleConditions(improvement_threshold=20),
            recipients=RuleRecipients(
                officials=["sai_official_1", "regional_scout"],
                email_addresses=["scouts@sai.gov.in"],
            ),
            frequency=RuleFrequency.DAILY,
            priority=Priority.MEDIUM,
        ),
    ]


def improvement_priority(improvement: float, overall_score: float) -> Priority:
    if improvement >= 30 or overall_score > 90:
        return Priority.HIGH
    if improvement >= 15 or overall_score > 80:
        return Priority.MEDIUM
    return Priority.LOW


def matches_conditions(rule: NotificationRule, subject: SubjectProfile, profile: ScoreProfile) -> bool:
    """Evaluate the subject-level predicates of a rule (all must hold)."""
    conditions = rule.conditions
    if conditions.min_score is not None and profile.overall_score < conditions.min_score:
        return False
    if conditions.max_age is not None and subject.age > conditions.max_age:
        return False
    if conditions.sports is not None:
        declared = {s.lower() for s in subject.sports}
        if not any(s.lower() in declared for s in conditions.sports):
            return False
    if conditions.regions is not None and subject.state not in conditions.regions:
        return False
    return True


class RuleStore:
    """Stored notification rules."""

    SEEDED_KEY = "rules:seeded"

    def __init__(self, store: BlobStore):
        self._store = store
        self._rules = KeyedRepository(store, "rules", NotificationRule)

    async def _ensure_seeded(self) -> None:
        if await self._store.get(self.SEEDED_KEY) is not None:
            return
        for rule in default_rules():
            await self._rules.upsert(rule)
        await self._store.set(self.SEEDED_KEY, "1")
        logger.info("default_rules_installed")

    async def list_rules(self, active_only: bool = False) -> list[NotificationRule]:
        await self._ensure_seeded()
        rules = await self._rules.list_all()
        return [r for r in rules if r.active] if active_only else rules

    async def get_rule(self, rule_id: str) -> NotificationRule | None:
        await self._ensure_seeded()
        return await self._rules.get(rule_id)

    async def create_rule(self, rule: NotificationRule) -> NotificationRule:
        await self._ensure_seeded()
        await self._rules.upsert(rule)
        logger.info("rule_created", rule_id=rule.id, name=rule.name)
        return rule

    async def update_rule(self, rule_id: str, changes: dict[str, Any]) -> NotificationRule:
        """Apply field changes to a rule.

        Raises:
            NotFoundError: If the rule does not exist
        """
        await self._ensure_seeded()
        changes = {k: v for k, v in changes.items() if k != "id"}

        def apply(rule: NotificationRule) -> NotificationRule:
            return NotificationRule.model_validate({**rule.model_dump(), **changes})

        updated = await self._rules.update(rule_id, apply)
        if updated is None:
            raise NotFoundError("rule", rule_id)
        logger.info("rule_updated", rule_id=rule_id, fields=sorted(changes))
        return updated

    async def delete_rule(self, rule_id: str) -> None:
        """Delete a rule.

        Raises:
            NotFoundError: If the rule does not exist
        """
        await self._ensure_seeded()
        if not await self._rules.delete(rule_id):
            raise NotFoundError("rule", rule_id)
        logger.info("rule_deleted", rule_id=rule_id)


class NotificationRuleEngine:
    """Evaluates active rules for scoring events and dispatches alerts.

    Every event first requires the subject's contact permission; without
    it all rules are skipped. Each satisfied rule yields one alert.
    """

    def __init__(self, rules: RuleStore, consents: ConsentStore, dispatcher: AlertDispatcher):
        self._rules = rules
        self._consents = consents
        self._dispatcher = dispatcher

    async def _eligible_rules(
        self,
        event: str,
        subject: SubjectProfile,
        profile: ScoreProfile,
        triggers: Callable[[NotificationRule], bool],
    ) -> list[NotificationRule]:
        if not await self._consents.has_valid_consent(subject.subject_id, ConsentScope.CONTACT_PERMISSION):
            logger.info(
                "alert_rules_skipped",
                rule_event=event,
                subject_id=subject.subject_id,
                reason="no_contact_consent",
            )
            return []

        rules = await self._rules.list_rules(active_only=True)
        return [r for r in rules if matches_conditions(r, subject, profile) and triggers(r)]

    async def _dispatch_all(self, alerts: list[Alert]) -> list[Alert]:
        delivered: list[Alert] = []
        for alert in alerts:
            outcome = await self._dispatcher.dispatch(alert)
            delivered.append(outcome.alert)
        return delivered

    @staticmethod
    def _payload(subject: SubjectProfile, profile: ScoreProfile, **kwargs: Any) -> AlertPayload:
        return AlertPayload(
            percentile=profile.percentile,
            recommended_sports=list(profile.recommended_sports),
            location=subject.location,
            region=subject.state or None,
            age=subject.age,
            **kwargs,
        )

    async def process_new_assessment(
        self,
        subject: SubjectProfile,
        assessment: AssessmentResult,
        profile: ScoreProfile,
    ) -> list[Alert]:
        """Alert rules that watch for new assessments."""
        rules = await self._eligible_rules(
            "new_assessment", subject, profile, lambda r: r.conditions.new_assessment_alert
        )
        action_required = profile.overall_score >= NEW_TALENT_ACTION_SCORE
        alerts = [
            Alert(
                type=AlertType.NEW_TALENT,
                priority=rule.priority,
                subject_id=subject.subject_id,
                subject_name=subject.name,
                title=f"New Talent Alert: {subject.name}",
                message=(
                    f"{subject.name} (Age: {subject.age}) has completed a {assessment.test_type.value} "
                    f"assessment with a score of {assessment.score}"
                ),
                payload=self._payload(subject, profile, current_score=profile.overall_score),
                action_required=action_required,
                action_items=list(NEW_TALENT_ACTIONS if action_required else MONITOR_ACTIONS),
                recipients=list(rule.recipients.officials),
                rule_id=rule.id,
            )
            for rule in rules
        ]
        return await self._dispatch_all(alerts)

    async def process_score_improvement(
        self,
        subject: SubjectProfile,
        previous_score: float,
        current_score: float,
        profile: ScoreProfile,
    ) -> list[Alert]:
        """Alert rules whose improvement threshold the change meets."""
        if previous_score <= 0:
            logger.debug("improvement_undefined", subject_id=subject.subject_id, previous_score=previous_score)
            return []

        improvement = (current_score - previous_score) / previous_score * 100
        rules = await self._eligible_rules(
            "score_improvement",
            subject,
            profile,
            lambda r: r.conditions.improvement_threshold is not None
            and improvement >= r.conditions.improvement_threshold,
        )
        action_required = improvement > IMPROVEMENT_ACTION_PERCENT
        alerts = [
            Alert(
                type=AlertType.SCORE_IMPROVEMENT,
                priority=improvement_priority(improvement, profile.overall_score),
                subject_id=subject.subject_id,
                subject_name=subject.name,
                title=f"Significant Improvement: {subject.name}",
                message=(
                    f"{subject.name} has shown {improvement:.1f}% improvement, "
                    f"reaching a score of {current_score:g}"
                ),
                payload=self._payload(
                    subject,
                    profile,
                    current_score=current_score,
                    previous_score=previous_score,
                    improvement=round(improvement, 2),
                ),
                action_required=action_required,
                action_items=list(IMPROVEMENT_ACTIONS) if action_required else [],
                recipients=list(rule.recipients.officials),
                rule_id=rule.id,
            )
            for rule in rules
        ]
        return await self._dispatch_all(alerts)

    async def process_elite_threshold(
        self,
        subject: SubjectProfile,
        profile: ScoreProfile,
    ) -> list[Alert]:
        """Alert elite-threshold rules when the overall score reaches 85."""
        if profile.overall_score < ELITE_THRESHOLD:
            return []

        rules = await self._eligible_rules(
            "elite_threshold", subject, profile, lambda r: r.conditions.elite_threshold_alert
        )
        alerts = [
            Alert(
                type=AlertType.ELITE_THRESHOLD,
                priority=Priority.HIGH,
                subject_id=subject.subject_id,
                subject_name=subject.name,
                title=f"Elite Threshold Reached: {subject.name}",
                message=(
                    f"{subject.name} has reached elite performance levels "
                    f"with a score of {profile.overall_score:g}"
                ),
                payload=self._payload(subject, profile, current_score=profile.overall_score),
                action_required=True,
                action_items=list(ELITE_ACTIONS),
                recipients=list(rule.recipients.officials),
                rule_id=rule.id,
            )
            for rule in rules
        ]
        return await self._dispatch_all(alerts)
