"""External talent registry integration."""

from talentwatch.registry.client import TalentRegistryClient
from talentwatch.registry.sync import TalentSyncService, build_talent_profile
from talentwatch.registry.types import (
    AuthToken,
    ExportTicket,
    RecruitmentStatus,
    SyncReport,
    TalentAssessmentSummary,
    TalentLocation,
    TalentProfile,
)

__all__ = [
    "AuthToken",
    "ExportTicket",
    "RecruitmentStatus",
    "SyncReport",
    "TalentAssessmentSummary",
    "TalentLocation",
    "TalentProfile",
    "TalentRegistryClient",
    "TalentSyncService",
    "build_talent_profile",
]
