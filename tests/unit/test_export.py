"""Unit tests for consent-validated export."""

import pytest
import pytest_asyncio

from talentwatch.compliance.anonymizer import AnonymizationOptions
from talentwatch.compliance.export import SecureExporter
from talentwatch.core.audit import AuditAction
from talentwatch.subjects import TestType


class TestSecureExporter:
    """Tests for SecureExporter.create_export."""

    @pytest.fixture
    def exporter(self, validator, anonymizer, audit_log):
        return SecureExporter(validator, anonymizer, audit_log)

    @pytest_asyncio.fixture
    async def subjects(self, make_subject, grant_consent):
        consenting = make_subject("athlete_1")
        refusing = make_subject("athlete_2")
        await grant_consent("athlete_1")
        await grant_consent("athlete_2", data_sharing=False)
        return [consenting, refusing]

    @pytest.mark.asyncio
    async def test_full_export_filters_denied_subjects(self, exporter, subjects, make_assessment):
        assessments = {"athlete_1": [make_assessment("athlete_1", TestType.SPEED, 80)]}

        result = await exporter.create_export(subjects, assessments, actor_id="official_1", purpose="export")

        assert [row["subject_id"] for row in result.data] == ["athlete_1"]
        assert result.data[0]["assessments"][0]["score"] == 80
        assert result.metadata.subject_count == 1
        assert result.metadata.consent_validated is True
        assert result.metadata.anonymized is False
        assert result.metadata.export_id.startswith("export_")

    @pytest.mark.asyncio
    async def test_anonymized_export(self, exporter, subjects, audit_log):
        result = await exporter.create_export(
            subjects, {}, actor_id="official_1", purpose="export", options=AnonymizationOptions()
        )

        assert result.metadata.anonymized is True
        assert result.data[0]["id"].startswith("anon_")
        assert len(await audit_log.query_events(action=AuditAction.ANONYMIZE)) == 1

    @pytest.mark.asyncio
    async def test_export_is_audited(self, exporter, subjects, audit_log):
        result = await exporter.create_export(subjects, {}, actor_id="official_1", purpose="export")

        entries = await audit_log.query_events(action=AuditAction.EXPORT)
        assert len(entries) == 1
        assert entries[0].subject_ids == ["athlete_1"]
        assert entries[0].details == f"Export ID: {result.metadata.export_id}, Anonymized: False"
