"""Tests for notification rules and the rule engine."""

import pytest

from talentwatch.core.exceptions import NotFoundError
from talentwatch.notifications.rules import (
    NotificationRuleEngine,
    default_rules,
    improvement_priority,
    matches_conditions,
)
from talentwatch.notifications.types import AlertType, NotificationRule, RuleConditions, RuleRecipients
from talentwatch.scoring.types import Priority, Rating, ScoreProfile
from talentwatch.subjects import TestType


def make_profile(subject_id: str = "athlete_1", overall: float = 60.0) -> ScoreProfile:
    return ScoreProfile(
        subject_id=subject_id,
        overall_score=overall,
        rating=Rating.AVERAGE,
        percentile=70,
        recommended_sports=["Athletics"],
    )


class TestRuleStore:
    """Tests for RuleStore."""

    @pytest.mark.asyncio
    async def test_defaults_seeded_once(self, rule_store) -> None:
        rules = await rule_store.list_rules()

        assert sorted(r.id for r in rules) == ["default_elite", "default_improvement"]

        await rule_store.delete_rule("default_elite")
        assert [r.id for r in await rule_store.list_rules()] == ["default_improvement"]

    @pytest.mark.asyncio
    async def test_create_update_delete(self, rule_store) -> None:
        rule = await rule_store.create_rule(
            NotificationRule(name="Young sprinters", conditions=RuleConditions(max_age=18, new_assessment_alert=True))
        )

        updated = await rule_store.update_rule(rule.id, {"active": False, "id": "ignored"})

        assert updated.id == rule.id
        assert updated.active is False
        assert rule.id not in [r.id for r in await rule_store.list_rules(active_only=True)]

        await rule_store.delete_rule(rule.id)
        assert await rule_store.get_rule(rule.id) is None

    @pytest.mark.asyncio
    async def test_unknown_rule_raises(self, rule_store) -> None:
        with pytest.raises(NotFoundError):
            await rule_store.update_rule("rule_missing", {"active": False})
        with pytest.raises(NotFoundError):
            await rule_store.delete_rule("rule_missing")

    @pytest.mark.asyncio
    async def test_invalid_update_rejected(self, rule_store) -> None:
        with pytest.raises(ValueError):
            await rule_store.update_rule("default_elite", {"conditions": {"min_score": 150}})


class TestConditions:
    """Tests for matches_conditions and improvement_priority."""

    def test_all_conditions_must_hold(self, make_subject) -> None:
        subject = make_subject("athlete_1", age=17, state="Maharashtra", sports=["Athletics"])
        rule = NotificationRule(
            name="r",
            conditions=RuleConditions(min_score=50, max_age=18, sports=["athletics"], regions=["Maharashtra"]),
        )

        assert matches_conditions(rule, subject, make_profile(overall=60)) is True
        assert matches_conditions(rule, subject, make_profile(overall=40)) is False
        assert matches_conditions(rule, make_subject(age=19, sports=["athletics"]), make_profile()) is False
        assert matches_conditions(rule, make_subject(state="Kerala", sports=["athletics"]), make_profile()) is False
        assert matches_conditions(rule, make_subject(sports=["football"]), make_profile()) is False

    def test_empty_conditions_match_everything(self, make_subject) -> None:
        assert matches_conditions(NotificationRule(name="r"), make_subject(), make_profile()) is True

    @pytest.mark.parametrize(
        ("improvement", "overall", "priority"),
        [
            (30, 50, Priority.HIGH),
            (10, 95, Priority.HIGH),
            (15, 50, Priority.MEDIUM),
            (5, 85, Priority.MEDIUM),
            (5, 50, Priority.LOW),
        ],
    )
    def test_improvement_priority(self, improvement, overall, priority) -> None:
        assert improvement_priority(improvement, overall) == priority

    def test_default_rule_shapes(self) -> None:
        elite, improvement = default_rules()

        assert elite.conditions.min_score == 85
        assert elite.conditions.elite_threshold_alert is True
        assert elite.priority == Priority.HIGH
        assert improvement.conditions.improvement_threshold == 20


class TestScoreImprovement:
    """Tests for NotificationRuleEngine.process_score_improvement."""

    @pytest.mark.asyncio
    async def test_thirty_percent_improvement_alerts_once(self, rule_engine, grant_consent, make_subject) -> None:
        subject = make_subject("athlete_1")
        await grant_consent("athlete_1")

        alerts = await rule_engine.process_score_improvement(subject, 50, 65, make_profile())

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.SCORE_IMPROVEMENT
        assert alert.priority == Priority.HIGH
        assert alert.action_required is True
        assert alert.payload.improvement == 30.0
        assert alert.payload.previous_score == 50
        assert alert.rule_id == "default_improvement"
        assert alert.recipients == ["sai_official_1", "regional_scout"]
        assert alert.delivered is True

    @pytest.mark.asyncio
    async def test_below_threshold_no_alert(self, rule_engine, grant_consent, make_subject) -> None:
        await grant_consent("athlete_1")

        assert await rule_engine.process_score_improvement(make_subject("athlete_1"), 60, 66, make_profile()) == []

    @pytest.mark.asyncio
    async def test_no_contact_consent_no_alerts(self, rule_engine, dispatcher, grant_consent, make_subject) -> None:
        await grant_consent("athlete_1", contact_permission=False)

        alerts = await rule_engine.process_score_improvement(make_subject("athlete_1"), 50, 65, make_profile())

        assert alerts == []
        assert await dispatcher.query() == []

    @pytest.mark.asyncio
    async def test_zero_previous_score_is_ignored(self, rule_engine, grant_consent, make_subject) -> None:
        await grant_consent("athlete_1")

        assert await rule_engine.process_score_improvement(make_subject("athlete_1"), 0, 65, make_profile()) == []


class TestOtherEvents:
    """Tests for new-assessment and elite-threshold events."""

    @pytest.mark.asyncio
    async def test_defaults_do_not_watch_new_assessments(
        self, rule_engine, grant_consent, make_subject, make_assessment
    ) -> None:
        await grant_consent("athlete_1")

        alerts = await rule_engine.process_new_assessment(
            make_subject("athlete_1"), make_assessment("athlete_1"), make_profile()
        )

        assert alerts == []

    @pytest.mark.asyncio
    async def test_new_assessment_rule(
        self, rule_engine, rule_store, grant_consent, make_subject, make_assessment
    ) -> None:
        await grant_consent("athlete_1")
        await rule_store.create_rule(
            NotificationRule(
                name="All new assessments",
                conditions=RuleConditions(new_assessment_alert=True),
                recipients=RuleRecipients(officials=["scout_7"]),
            )
        )

        alerts = await rule_engine.process_new_assessment(
            make_subject("athlete_1"),
            make_assessment("athlete_1", TestType.AGILITY, 82),
            make_profile(overall=81),
        )

        assert len(alerts) == 1
        assert alerts[0].type == AlertType.NEW_TALENT
        assert alerts[0].recipients == ["scout_7"]
        assert alerts[0].action_required is True
        assert "agility assessment with a score of 82" in alerts[0].message

    @pytest.mark.asyncio
    async def test_elite_threshold(self, rule_engine, grant_consent, make_subject) -> None:
        await grant_consent("athlete_1")

        alerts = await rule_engine.process_elite_threshold(make_subject("athlete_1"), make_profile(overall=88.2))

        assert len(alerts) == 1
        assert alerts[0].type == AlertType.ELITE_THRESHOLD
        assert alerts[0].priority == Priority.HIGH
        assert alerts[0].action_required is True
        assert alerts[0].rule_id == "default_elite"

    @pytest.mark.asyncio
    async def test_below_elite_threshold(self, rule_engine, grant_consent, make_subject) -> None:
        await grant_consent("athlete_1")

        assert await rule_engine.process_elite_threshold(make_subject("athlete_1"), make_profile(overall=84.9)) == []

    @pytest.mark.asyncio
    async def test_inactive_rules_are_skipped(self, rule_store, consent_store, dispatcher, grant_consent, make_subject):
        await grant_consent("athlete_1")
        await rule_store.update_rule("default_elite", {"active": False})
        engine = NotificationRuleEngine(rule_store, consent_store, dispatcher)

        assert await engine.process_elite_threshold(make_subject("athlete_1"), make_profile(overall=90)) == []

    @pytest.mark.asyncio
    async def test_every_event_skipped_without_contact_consent(
        self, rule_engine, rule_store, dispatcher, grant_consent, make_subject, make_assessment
    ) -> None:
        await grant_consent("athlete_1", contact_permission=False)
        await rule_store.create_rule(
            NotificationRule(name="All new assessments", conditions=RuleConditions(new_assessment_alert=True))
        )
        subject = make_subject("athlete_1")
        profile = make_profile(overall=92)

        assert await rule_engine.process_new_assessment(subject, make_assessment("athlete_1"), profile) == []
        assert await rule_engine.process_score_improvement(subject, 50, 80, profile) == []
        assert await rule_engine.process_elite_threshold(subject, profile) == []
        assert await dispatcher.query() == []
