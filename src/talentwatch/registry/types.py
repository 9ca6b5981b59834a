"""Payload types exchanged with the external talent registry."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class RecruitmentStatus(str, Enum):
    IDENTIFIED = "identified"
    SHORTLISTED = "shortlisted"
    CONTACTED = "contacted"
    RECRUITED = "recruited"
    NOT_ELIGIBLE = "not_eligible"


class AuthToken(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime
    official_id: str
    permissions: list[str] = Field(default_factory=list)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at


class TalentLocation(BaseModel):
    state: str = ""
    district: str = ""
    city: str = ""


class TalentAssessmentSummary(BaseModel):
    total_assessments: int = 0
    average_score: float = 0.0
    percentile_rank: int = 0
    strengths: list[str] = Field(default_factory=list)
    potential_sports: list[str] = Field(default_factory=list)


class TalentProfile(BaseModel):
    """Subject profile as submitted to the registry.

    ``synthetic`` marks a locally built profile returned because the
    registry could not be reached.
    """

    subject_id: str
    name: str
    age: int
    location: TalentLocation = Field(default_factory=TalentLocation)
    sports_categories: list[str] = Field(default_factory=list)
    assessment_summary: TalentAssessmentSummary = Field(default_factory=TalentAssessmentSummary)
    recruitment_status: RecruitmentStatus = RecruitmentStatus.NOT_ELIGIBLE
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    privacy_consent: bool = True
    synthetic: bool = False


class ExportTicket(BaseModel):
    download_url: str
    file_name: str
    expires_at: datetime
    synthetic: bool = False


@dataclass
class SyncReport:
    """Tri-partition of a bulk sync.

    Attributes:
        success: Profiles synced (or synthesized on fallback)
        failed: Subject id to error message
        consent_denied: Subject id to denial reason
    """

    success: list[TalentProfile] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    consent_denied: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.success) + len(self.failed) + len(self.consent_denied)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": [p.model_dump(mode="json") for p in self.success],
            "failed": self.failed,
            "consent_denied": self.consent_denied,
        }
