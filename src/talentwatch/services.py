"""Service wiring.

create_services() assembles every collaborator over one BlobStore so the
API, tests and scripts share a single construction path.
"""

from dataclasses import dataclass

from talentwatch.compliance.access import AccessValidator
from talentwatch.compliance.anonymizer import Anonymizer
from talentwatch.compliance.consent import ConsentStore
from talentwatch.compliance.export import SecureExporter
from talentwatch.compliance.retention import RetentionManager
from talentwatch.config.settings import Settings, get_settings
from talentwatch.core.audit import AuditLog
from talentwatch.notifications.channels import DeliveryChannel
from talentwatch.notifications.dispatcher import AlertDispatcher
from talentwatch.notifications.rules import NotificationRuleEngine, RuleStore
from talentwatch.notifications.types import ChannelType
from talentwatch.pipeline import TalentPipeline
from talentwatch.registry.client import TalentRegistryClient
from talentwatch.registry.sync import TalentSyncService
from talentwatch.reporting.generator import ReportGenerator
from talentwatch.scoring.benchmarks import create_noise_source
from talentwatch.scoring.engine import ScoringEngine
from talentwatch.scoring.talent import TalentScorer
from talentwatch.storage import BlobStore, RedisBlobStore, create_blob_store
from talentwatch.subjects import InMemorySubjectDirectory


@dataclass
class Services:
    """All collaborators sharing one store and audit log."""

    settings: Settings
    store: BlobStore
    directory: InMemorySubjectDirectory
    audit_log: AuditLog
    consents: ConsentStore
    validator: AccessValidator
    anonymizer: Anonymizer
    exporter: SecureExporter
    retention: RetentionManager
    scoring: ScoringEngine
    talent_scorer: TalentScorer
    rules: RuleStore
    dispatcher: AlertDispatcher
    rule_engine: NotificationRuleEngine
    reports: ReportGenerator
    registry: TalentRegistryClient
    sync: TalentSyncService
    pipeline: TalentPipeline

    async def aclose(self) -> None:
        await self.registry.aclose()
        if isinstance(self.store, RedisBlobStore):
            await self.store.close()


def create_services(
    settings: Settings | None = None,
    store: BlobStore | None = None,
    directory: InMemorySubjectDirectory | None = None,
    channels: dict[ChannelType, DeliveryChannel] | None = None,
    registry: TalentRegistryClient | None = None,
) -> Services:
    """Build the service graph.

    Args:
        settings: Settings override (default from environment)
        store: Blob store (default selected by settings)
        directory: Subject and assessment source (default empty in-memory)
        channels: Delivery channel overrides
        registry: Registry client override

    Returns:
        Services container
    """
    settings = settings or get_settings()
    store = store or create_blob_store(settings)
    directory = directory or InMemorySubjectDirectory()

    audit_log = AuditLog(store, max_entries=settings.retention.audit_log_max_entries)
    consents = ConsentStore(store, audit_log)
    validator = AccessValidator(consents, audit_log)
    anonymizer = Anonymizer(audit_log, hash_salt=settings.anonymizer_hash_salt.get_secret_value())
    scoring = ScoringEngine(create_noise_source(settings))
    talent_scorer = TalentScorer()
    rules = RuleStore(store)
    dispatcher = AlertDispatcher(
        store, audit_log, channels=channels, max_alerts=settings.retention.alert_max_entries
    )
    rule_engine = NotificationRuleEngine(rules, consents, dispatcher)
    registry = registry or TalentRegistryClient(settings)

    return Services(
        settings=settings,
        store=store,
        directory=directory,
        audit_log=audit_log,
        consents=consents,
        validator=validator,
        anonymizer=anonymizer,
        exporter=SecureExporter(validator, anonymizer, audit_log),
        retention=RetentionManager(consents, audit_log),
        scoring=scoring,
        talent_scorer=talent_scorer,
        rules=rules,
        dispatcher=dispatcher,
        rule_engine=rule_engine,
        reports=ReportGenerator(
            store,
            dispatcher,
            max_reports=settings.retention.report_max_entries,
            assessment_source=directory,
        ),
        registry=registry,
        sync=TalentSyncService(registry, validator, consents, audit_log),
        pipeline=TalentPipeline(
            assessments=directory,
            profiles=directory,
            scoring=scoring,
            talent_scorer=talent_scorer,
            validator=validator,
            anonymizer=anonymizer,
            rule_engine=rule_engine,
            analytics_fail_open=settings.analytics_fail_open,
        ),
    )
