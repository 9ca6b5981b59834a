"""Integration tests for the HTTP API."""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from talentwatch.compliance.consent import ConsentScope
from talentwatch.subjects import TestType

FULL_CONSENT = {
    "data_sharing": True,
    "talent_identification": True,
    "performance_analytics": True,
    "contact_permission": True,
    "retention_years": 2,
}


@pytest.mark.asyncio
class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    async def test_health_returns_healthy_status(self, test_client: AsyncClient):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["storage"]["status"] == "healthy"

    async def test_response_carries_request_id(self, test_client: AsyncClient):
        response = await test_client.get("/health")

        assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
class TestConsentEndpoints:
    """Tests for /v1/consents endpoints."""

    async def test_record_and_fetch(self, test_client: AsyncClient):
        response = await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)

        assert response.status_code == 200
        assert response.json()["talent_identification"] is True

        fetched = await test_client.get("/v1/consents/athlete_1")
        assert fetched.status_code == 200
        assert fetched.json()["retention_years"] == 2

        listed = await test_client.get("/v1/consents")
        assert listed.json()["total"] == 1

    async def test_omitted_scopes_are_not_granted(self, test_client: AsyncClient):
        response = await test_client.put("/v1/consents/athlete_1", json={"contact_permission": True})

        data = response.json()
        assert data["contact_permission"] is True
        assert data["data_sharing"] is False

    async def test_missing_consent_is_404(self, test_client: AsyncClient):
        response = await test_client.get("/v1/consents/nobody")

        assert response.status_code == 404
        error = response.json()
        assert error["error_code"] == "not_found"
        assert error["details"] == {"resource": "consent", "resource_id": "nobody"}
        assert error["request_id"] == response.headers["X-Request-ID"]

    async def test_delete_is_audited(self, test_client: AsyncClient, services):
        await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)

        response = await test_client.delete("/v1/consents/athlete_1")

        assert response.status_code == 204
        assert await services.consents.get("athlete_1") is None
        entries = await services.audit_log.query_events(action="delete")
        assert entries[0].actor_id == "official_1"
        assert (await test_client.delete("/v1/consents/athlete_1")).status_code == 404

    async def test_purge_expired(self, test_client: AsyncClient, services):
        await services.consents.record(
            "old", {ConsentScope.DATA_SHARING: True}, retention_years=1,
            now=datetime.now(UTC) - timedelta(days=400),
        )
        await test_client.put("/v1/consents/fresh", json=FULL_CONSENT)

        response = await test_client.post("/v1/consents/purge-expired")

        assert response.json() == {"deleted_consents": ["old"], "deleted_count": 1, "checked": 2}


@pytest.mark.asyncio
class TestAccessAndExport:
    """Tests for access validation, export and the audit log."""

    async def test_validate_access(self, test_client: AsyncClient):
        await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)

        response = await test_client.post(
            "/v1/access/validate",
            json={"subject_ids": ["athlete_1", "athlete_2"], "purpose": "sai_sync"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] == ["athlete_1"]
        assert data["denied"] == ["athlete_2"]
        assert data["reasons"] == {"athlete_2": "No privacy consent on record"}

    async def test_validate_requires_subjects(self, test_client: AsyncClient):
        response = await test_client.post("/v1/access/validate", json={"subject_ids": [], "purpose": "export"})

        assert response.status_code == 422

    async def test_export_drops_denied_subjects(self, test_client: AsyncClient, services, make_subject,
                                                make_assessment):
        for subject_id in ("athlete_1", "athlete_2"):
            services.directory.add_subject(make_subject(subject_id))
        services.directory.add_assessment(make_assessment("athlete_1", TestType.SPEED, 81))
        await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)

        response = await test_client.post(
            "/v1/exports", json={"subject_ids": ["athlete_1", "athlete_2"], "anonymize": True}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["metadata"]["subject_count"] == 1
        assert data["metadata"]["anonymized"] is True
        assert data["metadata"]["actor_id"] == "official_1"
        assert data["data"][0]["assessment_summary"]["score_range"] == "80-89"

    async def test_export_unknown_subject(self, test_client: AsyncClient):
        response = await test_client.post("/v1/exports", json={"subject_ids": ["ghost"]})

        assert response.status_code == 404

    async def test_audit_log_query(self, test_client: AsyncClient):
        await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)
        await test_client.post("/v1/access/validate", json={"subject_ids": ["athlete_1"], "purpose": "export"})

        response = await test_client.get("/v1/audit-log", params={"actor_id": "official_1"})

        entries = response.json()["entries"]
        assert [e["purpose"] for e in entries] == ["export"]
        assert entries[0]["details"] == "allowed=1, denied=0"

    async def test_audit_log_limit_bounds(self, test_client: AsyncClient):
        response = await test_client.get("/v1/audit-log", params={"limit": 5000})

        assert response.status_code == 422


@pytest.mark.asyncio
class TestAlertAndRuleEndpoints:
    """Tests for /v1/alerts and /v1/rules."""

    async def _seed_improvement(self, test_client, services, make_subject, make_assessment) -> str:
        now = datetime.now(UTC)
        services.directory.add_subject(make_subject("athlete_1"))
        services.directory.add_assessment(make_assessment("athlete_1", TestType.SPEED, 50, now - timedelta(days=7)))
        latest = make_assessment("athlete_1", TestType.SPEED, 65, now)
        services.directory.add_assessment(latest)
        await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)
        return latest.assessment_id

    async def test_process_then_manage_alert(self, test_client: AsyncClient, services, make_subject,
                                             make_assessment):
        assessment_id = await self._seed_improvement(test_client, services, make_subject, make_assessment)

        processed = await test_client.post(f"/v1/assessments/{assessment_id}/process")
        assert processed.status_code == 200
        alerts = processed.json()["alerts"]
        assert [a["type"] for a in alerts] == ["score_improvement"]
        alert_id = alerts[0]["id"]

        listed = await test_client.get("/v1/alerts", params={"type": "score_improvement"})
        assert listed.json()["total"] == 1

        read = await test_client.post(f"/v1/alerts/{alert_id}/read", json={"user_id": "regional_scout"})
        assert read.json()["read_by"] == ["regional_scout"]

        unread = await test_client.get(
            "/v1/alerts", params={"recipient_id": "regional_scout", "unread_only": True}
        )
        assert unread.json()["total"] == 0

        archived = await test_client.post(f"/v1/alerts/{alert_id}/archive")
        assert archived.json()["archived"] is True

    async def test_unknown_alert(self, test_client: AsyncClient):
        assert (await test_client.get("/v1/alerts/alert_missing")).status_code == 404
        response = await test_client.post("/v1/alerts/alert_missing/read", json={"user_id": "u"})
        assert response.status_code == 404

    async def test_process_unknown_assessment(self, test_client: AsyncClient):
        response = await test_client.post("/v1/assessments/missing/process")

        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "assessment"

    async def test_delivery_config_roundtrip(self, test_client: AsyncClient):
        body = {"channels": {"sms": {"enabled": True, "options": {}}}}

        assert (await test_client.put("/v1/alerts/delivery-config", json=body)).status_code == 200

        config = (await test_client.get("/v1/alerts/delivery-config")).json()
        assert config["channels"]["sms"]["enabled"] is True
        assert "email" not in config["channels"]

    async def test_rule_crud(self, test_client: AsyncClient):
        listed = await test_client.get("/v1/rules")
        assert listed.json()["total"] == 2

        created = await test_client.post(
            "/v1/rules",
            json={"name": "Young sprinters", "conditions": {"max_age": 18, "new_assessment_alert": True}},
        )
        assert created.status_code == 201
        rule_id = created.json()["id"]

        patched = await test_client.patch(f"/v1/rules/{rule_id}", json={"active": False})
        assert patched.json()["active"] is False
        assert patched.json()["conditions"]["max_age"] == 18

        active = await test_client.get("/v1/rules", params={"active_only": True})
        assert rule_id not in [r["id"] for r in active.json()["rules"]]

        assert (await test_client.delete(f"/v1/rules/{rule_id}")).status_code == 204
        assert (await test_client.get(f"/v1/rules/{rule_id}")).status_code == 404

    async def test_invalid_rule_update(self, test_client: AsyncClient):
        response = await test_client.patch(
            "/v1/rules/default_elite", json={"conditions": {"min_score": 150}}
        )

        assert response.status_code == 422


@pytest.mark.asyncio
class TestReportEndpoints:
    """Tests for /v1/reports."""

    async def test_generate_is_idempotent(self, test_client: AsyncClient):
        body = {"type": "weekly", "start": "2026-10-11T00:00:00Z", "end": "2026-10-18T00:00:00Z"}

        first = await test_client.post("/v1/reports", json=body)
        second = await test_client.post("/v1/reports", json=body)

        assert first.status_code == 201
        assert first.json()["id"] == second.json()["id"]
        assert first.json()["title"] == "Weekly Talent Report"

        listed = await test_client.get("/v1/reports")
        assert listed.json()["total"] == 1

        fetched = await test_client.get(f"/v1/reports/{first.json()['id']}")
        assert fetched.status_code == 200

    async def test_inverted_window(self, test_client: AsyncClient):
        body = {"type": "daily", "start": "2026-10-12T00:00:00Z", "end": "2026-10-11T00:00:00Z"}

        response = await test_client.post("/v1/reports", json=body)

        assert response.status_code == 422
        assert response.json()["error_code"] == "validation_error"

    async def test_unknown_report(self, test_client: AsyncClient):
        assert (await test_client.get("/v1/reports/report_missing")).status_code == 404


@pytest.mark.asyncio
class TestRegistrySyncEndpoint:
    """Tests for POST /v1/registry/sync."""

    async def test_unknown_subject(self, test_client: AsyncClient):
        response = await test_client.post("/v1/registry/sync", json={"subject_ids": ["ghost"]})

        assert response.status_code == 404

    async def test_unauthenticated_registry_reports_failure(self, test_client: AsyncClient, services, make_subject):
        services.directory.add_subject(make_subject("athlete_1"))
        services.directory.add_subject(make_subject("athlete_2"))
        await test_client.put("/v1/consents/athlete_1", json=FULL_CONSENT)

        response = await test_client.post("/v1/registry/sync", json={"subject_ids": ["athlete_1", "athlete_2"]})

        assert response.status_code == 200
        data = response.json()
        assert list(data["failed"]) == ["athlete_1"]
        assert data["consent_denied"] == {"athlete_2": "No privacy consent on record"}
        assert data["success"] == []
