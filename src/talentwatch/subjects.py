"""Subject and assessment records consumed from the surrounding system.

Assessments and profiles are owned elsewhere; this package only reads them
through the AssessmentSource and ProfileSource protocols.

Classes:
    TestType: Kinds of physical assessment
    AssessmentResult: A single scored assessment (read-only)
    SubjectProfile: Identity and location details of a data subject
    AssessmentSource: Read interface to the assessment subsystem
    ProfileSource: Read interface to the profile subsystem
    InMemorySubjectDirectory: Dictionary-backed implementation of both
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field, field_validator


class TestType(str, Enum):
    """Kinds of physical assessment."""

    __test__ = False

    SPEED = "speed"
    AGILITY = "agility"
    STRENGTH = "strength"
    ENDURANCE = "endurance"
    FLEXIBILITY = "flexibility"
    BALANCE = "balance"


class AssessmentResult(BaseModel):
    """A scored assessment."""

    model_config = {"frozen": True}

    assessment_id: str
    subject_id: str
    test_type: TestType
    score: int = Field(ge=0, le=100)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC."""
        return v if v.tzinfo else v.replace(tzinfo=UTC)


class SubjectProfile(BaseModel):
    """A data subject's profile."""

    subject_id: str
    name: str
    age: int = Field(ge=0)
    city: str = ""
    state: str = ""
    sports: list[str] = Field(default_factory=list)
    email: str | None = None
    phone: str | None = None

    @property
    def location(self) -> str:
        return ", ".join(part for part in (self.city, self.state) if part)


class AssessmentSource(Protocol):
    """Read access to stored assessments."""

    async def get_assessment_by_id(self, assessment_id: str) -> AssessmentResult | None: ...

    async def get_subject_assessments(self, subject_id: str) -> list[AssessmentResult]: ...

    async def list_assessments_in_window(self, start: datetime, end: datetime) -> list[AssessmentResult]: ...


class ProfileSource(Protocol):
    """Read access to subject profiles."""

    async def get_subject_by_id(self, subject_id: str) -> SubjectProfile | None: ...


class InMemorySubjectDirectory:
    """AssessmentSource and ProfileSource backed by dictionaries."""

    def __init__(self) -> None:
        self._profiles: dict[str, SubjectProfile] = {}
        self._assessments: dict[str, AssessmentResult] = {}

    def add_subject(self, profile: SubjectProfile) -> None:
        self._profiles[profile.subject_id] = profile

    def add_assessment(self, assessment: AssessmentResult) -> None:
        self._assessments[assessment.assessment_id] = assessment

    async def get_subject_by_id(self, subject_id: str) -> SubjectProfile | None:
        return self._profiles.get(subject_id)

    async def get_assessment_by_id(self, assessment_id: str) -> AssessmentResult | None:
        return self._assessments.get(assessment_id)

    async def get_subject_assessments(self, subject_id: str) -> list[AssessmentResult]:
        return sorted(
            (a for a in self._assessments.values() if a.subject_id == subject_id),
            key=lambda a: a.timestamp,
        )

    async def list_assessments_in_window(self, start: datetime, end: datetime) -> list[AssessmentResult]:
        """Assessments with ``start <= timestamp < end``, oldest first."""
        return sorted(
            (a for a in self._assessments.values() if start <= a.timestamp < end),
            key=lambda a: a.timestamp,
        )
