"""Pytest fixtures for Talentwatch tests."""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime
from itertools import count

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from talentwatch.compliance.access import AccessValidator
from talentwatch.compliance.anonymizer import Anonymizer
from talentwatch.compliance.consent import ConsentScope, ConsentStore
from talentwatch.config.settings import Settings, get_settings
from talentwatch.core.audit import AuditLog
from talentwatch.notifications.channels import default_channels
from talentwatch.notifications.dispatcher import AlertDispatcher
from talentwatch.notifications.rules import NotificationRuleEngine, RuleStore
from talentwatch.services import Services, create_services
from talentwatch.storage.memory import InMemoryBlobStore
from talentwatch.subjects import AssessmentResult, SubjectProfile, TestType


# =============================================================================
# Structlog and Settings Fixtures
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Drop cached settings so environment changes in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: in-memory storage, fixed salt, no jitter."""
    return Settings(
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        anonymizer_hash_salt=SecretStr("test-salt"),
        registry_base_url="https://registry.test/api/v1",
        registry_api_key=SecretStr("test-registry-key"),
    )


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_subject() -> Callable[..., SubjectProfile]:
    """Build SubjectProfiles with sensible defaults."""
    ids = count(1)

    def factory(subject_id: str | None = None, **kwargs) -> SubjectProfile:
        defaults = {
            "name": "Priya Sharma",
            "age": 17,
            "city": "Pune",
            "state": "Maharashtra",
            "sports": ["athletics"],
            "email": "priya@example.com",
            "phone": "+91-9000000000",
        }
        defaults.update(kwargs)
        return SubjectProfile(subject_id=subject_id or f"athlete_{next(ids)}", **defaults)

    return factory


@pytest.fixture
def make_assessment() -> Callable[..., AssessmentResult]:
    """Build AssessmentResults with increasing ids."""
    ids = count(1)

    def factory(
        subject_id: str,
        test_type: TestType = TestType.SPEED,
        score: int = 70,
        timestamp: datetime | None = None,
        assessment_id: str | None = None,
    ) -> AssessmentResult:
        return AssessmentResult(
            assessment_id=assessment_id or f"assessment_{next(ids)}",
            subject_id=subject_id,
            test_type=test_type,
            score=score,
            timestamp=timestamp or datetime.now(UTC),
        )

    return factory


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def audit_log(store: InMemoryBlobStore) -> AuditLog:
    return AuditLog(store, max_entries=1000)


@pytest.fixture
def consent_store(store: InMemoryBlobStore, audit_log: AuditLog) -> ConsentStore:
    return ConsentStore(store, audit_log)


@pytest.fixture
def validator(consent_store: ConsentStore, audit_log: AuditLog) -> AccessValidator:
    return AccessValidator(consent_store, audit_log)


@pytest.fixture
def anonymizer(audit_log: AuditLog) -> Anonymizer:
    return Anonymizer(audit_log, hash_salt="test-salt")


@pytest.fixture
def channels():
    return default_channels()


@pytest.fixture
def dispatcher(store: InMemoryBlobStore, audit_log: AuditLog, channels) -> AlertDispatcher:
    return AlertDispatcher(store, audit_log, channels=channels, max_alerts=1000)


@pytest.fixture
def rule_store(store: InMemoryBlobStore) -> RuleStore:
    return RuleStore(store)


@pytest.fixture
def rule_engine(
    rule_store: RuleStore,
    consent_store: ConsentStore,
    dispatcher: AlertDispatcher,
) -> NotificationRuleEngine:
    return NotificationRuleEngine(rule_store, consent_store, dispatcher)


@pytest_asyncio.fixture
async def services(test_settings: Settings) -> AsyncGenerator[Services, None]:
    """Full service graph over a fresh in-memory store."""
    container = create_services(test_settings, store=InMemoryBlobStore())
    yield container
    await container.aclose()


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def test_app(test_settings: Settings, services: Services) -> FastAPI:
    """Create a FastAPI test application over the test service graph."""
    from talentwatch.api.app import create_app

    return create_app(settings=test_settings, services=services)


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client calling the test application directly."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        headers={"X-Actor-ID": "official_1"},
    ) as client:
        yield client


@pytest.fixture
def grant_consent(consent_store: ConsentStore) -> Callable:
    """Record consent for a subject; every scope is granted unless overridden."""

    async def grant(subject_id: str, retention_years: int = 2, now: datetime | None = None, **overrides: bool):
        scopes = {scope: True for scope in ConsentScope}
        for scope in ConsentScope:
            name = _SCOPE_ARGS[scope]
            if name in overrides:
                scopes[scope] = overrides[name]
        return await consent_store.record(subject_id, scopes, retention_years, now=now)

    return grant


_SCOPE_ARGS = {
    ConsentScope.DATA_SHARING: "data_sharing",
    ConsentScope.TALENT_IDENTIFICATION: "talent_identification",
    ConsentScope.PERFORMANCE_ANALYTICS: "performance_analytics",
    ConsentScope.CONTACT_PERMISSION: "contact_permission",
}
