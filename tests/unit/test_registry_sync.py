"""Tests for consent-gated registry synchronisation."""

import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from talentwatch.core.audit import AuditAction
from talentwatch.core.exceptions import ConsentDeniedError
from talentwatch.registry.client import TalentRegistryClient
from talentwatch.registry.sync import TalentSyncService, build_talent_profile
from talentwatch.registry.types import AuthToken, RecruitmentStatus
from talentwatch.subjects import TestType


def registry_handler(status_by_subject: dict[str, int]):
    """Echo synced profiles back, or fail with the configured status."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        status = status_by_subject.get(body["subject_id"], 200)
        if status != 200:
            return httpx.Response(status)
        return httpx.Response(200, json={"data": body})

    return handler


@pytest.fixture
def make_sync_service(test_settings, validator, consent_store, audit_log):
    clients = []

    def factory(handler) -> TalentSyncService:
        token = AuthToken(
            access_token="access-1",
            expires_at=datetime.now(UTC) + timedelta(hours=1),
            official_id="official_1",
        )
        client = TalentRegistryClient(test_settings, token=token, transport=httpx.MockTransport(handler))
        clients.append(client)
        return TalentSyncService(client, validator, consent_store, audit_log)

    yield factory


class TestBuildTalentProfile:
    """Tests for build_talent_profile."""

    def test_summary(self, make_subject, make_assessment):
        subject = make_subject("athlete_1")
        assessments = [
            make_assessment("athlete_1", TestType.SPEED, 90),
            make_assessment("athlete_1", TestType.AGILITY, 80),
            make_assessment("athlete_1", TestType.BALANCE, 60),
        ]

        profile = build_talent_profile(subject, assessments)

        summary = profile.assessment_summary
        assert summary.total_assessments == 3
        assert summary.average_score == 76.67
        assert summary.percentile_rank == 79
        assert summary.strengths == ["speed", "agility"]
        assert summary.potential_sports == ["athletics", "football", "hockey", "badminton", "basketball"]
        assert profile.recruitment_status == RecruitmentStatus.NOT_ELIGIBLE
        assert profile.location.state == "Maharashtra"

    def test_high_average_is_identified(self, make_subject, make_assessment):
        profile = build_talent_profile(make_subject("a1"), [make_assessment("a1", TestType.SPEED, 85)])

        assert profile.recruitment_status == RecruitmentStatus.IDENTIFIED

    def test_no_assessments(self, make_subject):
        profile = build_talent_profile(make_subject("a1"), [])

        assert profile.assessment_summary.average_score == 0.0
        assert profile.assessment_summary.percentile_rank == 10


class TestSyncSubject:
    """Tests for TalentSyncService.sync_subject."""

    @pytest.mark.asyncio
    async def test_sync_is_audited(self, make_sync_service, grant_consent, make_subject, audit_log):
        service = make_sync_service(registry_handler({}))
        await grant_consent("athlete_1")

        profile = await service.sync_subject(make_subject("athlete_1"), [])

        assert profile.synthetic is False
        entries = await audit_log.query_events(action=AuditAction.SYNC)
        assert len(entries) == 1
        assert entries[0].actor_id == "official_1"
        assert entries[0].purpose == "SAI talent identification sync"

    @pytest.mark.asyncio
    async def test_registry_down_returns_synthetic_profile(self, make_sync_service, grant_consent, make_subject):
        service = make_sync_service(registry_handler({"athlete_1": 503}))
        await grant_consent("athlete_1")

        profile = await service.sync_subject(make_subject("athlete_1"), [])

        assert profile.synthetic is True
        assert profile.subject_id == "athlete_1"

    @pytest.mark.asyncio
    async def test_missing_consent_raises(self, make_sync_service, grant_consent, make_subject, audit_log):
        service = make_sync_service(registry_handler({}))
        await grant_consent("athlete_1", talent_identification=False)

        with pytest.raises(ConsentDeniedError) as exc_info:
            await service.sync_subject(make_subject("athlete_1"), [])

        assert exc_info.value.purpose == "talent_identification"
        assert await audit_log.query_events(action=AuditAction.SYNC) == []

    @pytest.mark.asyncio
    async def test_expired_consent_is_not_masked_by_fallback(
        self, make_sync_service, grant_consent, make_subject
    ):
        service = make_sync_service(registry_handler({"athlete_1": 503}))
        await grant_consent("athlete_1", retention_years=1, now=datetime.now(UTC) - timedelta(days=400))

        with pytest.raises(ConsentDeniedError):
            await service.sync_subject(make_subject("athlete_1"), [])


class TestBulkSync:
    """Tests for TalentSyncService.bulk_sync."""

    @pytest.mark.asyncio
    async def test_every_subject_lands_in_one_bucket(self, make_sync_service, grant_consent, make_subject):
        service = make_sync_service(registry_handler({"athlete_3": 400, "athlete_4": 503}))
        subjects = [make_subject(f"athlete_{i}") for i in range(1, 5)]
        await grant_consent("athlete_1")
        await grant_consent("athlete_3")
        await grant_consent("athlete_4")

        report = await service.bulk_sync(subjects, {})

        assert sorted(p.subject_id for p in report.success) == ["athlete_1", "athlete_4"]
        assert [p.synthetic for p in report.success if p.subject_id == "athlete_4"] == [True]
        assert list(report.failed) == ["athlete_3"]
        assert report.consent_denied == {"athlete_2": "No privacy consent on record"}
        assert report.total == 4

    @pytest.mark.asyncio
    async def test_bulk_sync_validates_once(self, make_sync_service, grant_consent, make_subject, audit_log):
        service = make_sync_service(registry_handler({}))
        await grant_consent("athlete_1")

        await service.bulk_sync([make_subject("athlete_1")], {})

        validations = [e for e in await audit_log.query_events(action=AuditAction.ACCESS) if e.purpose == "sai_sync"]
        assert len(validations) == 1


class TestExportFallback:
    """Tests for TalentSyncService.export_talent_data."""

    @pytest.mark.asyncio
    async def test_unreachable_registry_yields_local_ticket(self, make_sync_service):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = make_sync_service(refuse)

        ticket = await service.export_talent_data({"state": "Kerala"}, file_format="csv")

        assert ticket.synthetic is True
        assert ticket.download_url.startswith("local://exports/")
        assert ticket.file_name.endswith(".csv")
