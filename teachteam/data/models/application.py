"""
Application data models for TeachTeam.

Defines the stored application document, its embedded credential and role
history, and the boundary schemas used to create and update applications.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from teachteam.utils.constants import (
    COMMENT_MAX_LENGTH,
    COMMENT_MIN_LENGTH,
    CREDENTIAL_MIN_YEAR,
    GPA_RANGE,
    ApplicationStatus,
    Availability,
    SessionType,
)

from .base import BaseDocument, EmbeddedModel, PyObjectId


class AcademicCredential(EmbeddedModel):
    """A degree held by the candidate."""

    degree: str = Field(min_length=1)
    institution: str = Field(min_length=1)
    year: int
    gpa: Optional[float] = None

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        this_year = date.today().year
        if v < CREDENTIAL_MIN_YEAR or v > this_year:
            raise ValueError(f"Year must be between {CREDENTIAL_MIN_YEAR} and {this_year}")
        return v

    @field_validator("gpa")
    @classmethod
    def validate_gpa(cls, v: Optional[float]) -> Optional[float]:
        low, high = GPA_RANGE
        if v is not None and (v < low or v > high):
            raise ValueError(f"GPA must be between {low:g} and {high:g}")
        return v


class PreviousRole(EmbeddedModel):
    """A prior teaching or industry position."""

    position: str = Field(min_length=1)
    organisation: str = Field(min_length=1)
    start_date: date
    end_date: Optional[date] = None  # None while the role is ongoing
    description: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self) -> "PreviousRole":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class Application(BaseDocument):
    """
    A candidate's application to teach one course in one session type.

    ``ranking`` is only meaningful while ``status`` is Selected; the
    selection service keeps the two consistent on every write.
    """

    candidate_id: Optional[PyObjectId] = None
    candidate_email: str
    course_id: str
    session_type: SessionType
    skills: list[str] = Field(default_factory=list)
    availability: Availability = Availability.PARTTIME

    status: ApplicationStatus = ApplicationStatus.PENDING
    ranking: Optional[int] = Field(default=None, ge=1)
    comments: list[str] = Field(default_factory=list)

    academic_credentials: list[AcademicCredential] = Field(default_factory=list)
    previous_roles: list[PreviousRole] = Field(default_factory=list)

    @property
    def is_selected(self) -> bool:
        return self.status == ApplicationStatus.SELECTED

    class Settings:
        """MongoDB collection settings."""

        name = "applications"
        indexes = [
            [("candidate_email", 1), ("course_id", 1), ("session_type", 1)],
            "course_id",
            "status",
            "ranking",
            "created_at",
        ]


class ApplicationCreate(BaseModel):
    """Schema for a candidate submitting a new application."""

    candidate_email: EmailStr
    candidate_id: Optional[str] = None
    course_id: str = Field(min_length=1)
    session_type: SessionType
    skills: list[str]
    availability: Availability
    academic_credentials: list[AcademicCredential] = Field(default_factory=list)
    previous_roles: list[PreviousRole] = Field(default_factory=list)

    @field_validator("skills")
    @classmethod
    def validate_skills(cls, v: list[str]) -> list[str]:
        """Strip entries, keep order, reject empty lists and duplicates."""
        skills = [s.strip() for s in v if s and s.strip()]
        if not skills:
            raise ValueError("At least one skill is required")
        seen: set[str] = set()
        for skill in skills:
            key = skill.lower()
            if key in seen:
                raise ValueError(f"Duplicate skill: {skill}")
            seen.add(key)
        return skills

    def to_document(self) -> Application:
        """Build a Pending application document from this submission."""
        return Application(
            candidate_id=self.candidate_id,
            candidate_email=str(self.candidate_email).lower(),
            course_id=self.course_id,
            session_type=self.session_type,
            skills=self.skills,
            availability=self.availability,
            academic_credentials=self.academic_credentials,
            previous_roles=self.previous_roles,
        )


class ApplicationStatusUpdate(BaseModel):
    """Schema for a reviewer changing an application's status."""

    status: ApplicationStatus
    ranking: Optional[int] = Field(default=None, ge=1)


class RankingUpdate(BaseModel):
    """Schema for a reviewer moving an application to a new rank."""

    ranking: int = Field(ge=1)


class CommentCreate(BaseModel):
    """Schema for a reviewer comment."""

    comment: str

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        text = (v or "").strip()
        if not text:
            raise ValueError("Comment cannot be empty")
        if len(text) < COMMENT_MIN_LENGTH:
            raise ValueError(f"Comment must be at least {COMMENT_MIN_LENGTH} characters")
        if len(text) > COMMENT_MAX_LENGTH:
            raise ValueError(f"Comment must not exceed {COMMENT_MAX_LENGTH} characters")
        return text
