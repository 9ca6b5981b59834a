"""Privacy compliance: consent, access validation, anonymization and export."""

from talentwatch.compliance.access import (
    EXPIRED_REASON,
    NO_CONSENT_REASON,
    PURPOSE_SCOPES,
    AccessDecision,
    AccessValidator,
    scope_for_purpose,
)
from talentwatch.compliance.anonymizer import (
    AnonymizationBatch,
    AnonymizationOptions,
    AnonymizedRecord,
    Anonymizer,
    AssessmentSummary,
)
from talentwatch.compliance.consent import (
    ConsentContext,
    ConsentRecord,
    ConsentScope,
    ConsentStore,
)
from talentwatch.compliance.export import ExportMetadata, ExportResult, SecureExporter
from talentwatch.compliance.retention import PurgeResult, RetentionManager

__all__ = [
    # Consent
    "ConsentContext",
    "ConsentRecord",
    "ConsentScope",
    "ConsentStore",
    # Access
    "AccessDecision",
    "AccessValidator",
    "EXPIRED_REASON",
    "NO_CONSENT_REASON",
    "PURPOSE_SCOPES",
    "scope_for_purpose",
    # Anonymization
    "AnonymizationBatch",
    "AnonymizationOptions",
    "AnonymizedRecord",
    "Anonymizer",
    "AssessmentSummary",
    # Export and retention
    "ExportMetadata",
    "ExportResult",
    "PurgeResult",
    "RetentionManager",
    "SecureExporter",
]
