"""
Derived view models for the applicant review screens.

These models are never stored: they are built at read time from stored
applications and are what the filter, ranking and statistics code consumes.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from teachteam.utils.constants import ApplicationStatus, Availability, SessionType

from .application import AcademicCredential, PreviousRole
from .base import EmbeddedModel, utc_now


class ApplicationDisplay(EmbeddedModel):
    """Flattened application joined with course and candidate metadata."""

    id: str
    candidate_name: str
    candidate_email: str
    course_id: str
    course_code: str
    course_name: str
    session_type: SessionType
    skills: list[str] = Field(default_factory=list)
    availability: Availability
    status: ApplicationStatus = ApplicationStatus.PENDING
    ranking: Optional[int] = None
    comments: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    academic_credentials: list[AcademicCredential] = Field(default_factory=list)
    previous_roles: list[PreviousRole] = Field(default_factory=list)

    @property
    def is_selected(self) -> bool:
        return self.status == ApplicationStatus.SELECTED


class SearchCriteria(BaseModel):
    """
    Optional search inputs from the applicant search form.

    Blank or whitespace-only values mean "not specified".
    """

    course_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("course_name", "courseName"),
    )
    candidate_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("candidate_name", "tutor_name", "tutorName"),
    )
    availability: Optional[str] = None
    skill_set: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("skill_set", "skillSet"),
    )
    session_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("session_type", "sessionType"),
    )

    def active(self) -> dict[str, str]:
        """Specified criteria with surrounding whitespace removed."""
        values = {
            "course_name": self.course_name,
            "candidate_name": self.candidate_name,
            "availability": self.availability,
            "skill_set": self.skill_set,
            "session_type": self.session_type,
        }
        return {k: v.strip() for k, v in values.items() if v is not None and v.strip()}

    @property
    def is_empty(self) -> bool:
        return not self.active()


class SelectionCount(BaseModel):
    """How many Selected applications a candidate holds."""

    name: str
    count: int


class ApplicantRef(BaseModel):
    """Lightweight reference to an applicant."""

    name: str


class Statistics(BaseModel):
    """Selection summary for a set of applications."""

    total_applicants: int = 0
    selected_count: int = 0
    pending_count: int = 0
    rejected_count: int = 0
    most_selected: Optional[SelectionCount] = None
    least_selected: Optional[SelectionCount] = None
    unselected_applicants: list[ApplicantRef] = Field(default_factory=list)


class CourseStatistics(Statistics):
    """Statistics for one course with role and availability breakdowns."""

    tutor_count: int = 0
    lab_assistant_count: int = 0
    fulltime_count: int = 0
    parttime_count: int = 0


class CandidateUnavailable(BaseModel):
    """Notification payload sent when an administrator blocks a candidate."""

    candidate_id: str
    candidate_email: str
    candidate_name: Optional[str] = None
    reason: Optional[str] = None
    occurred_at: datetime = Field(default_factory=utc_now)


class MultiCourseCandidate(BaseModel):
    """A candidate holding Selected applications in several courses."""

    name: str
    email: str
    course_count: int
    courses: list[str] = Field(default_factory=list)  # "COSC2758 - Full Stack Development"


class UnselectedCandidate(BaseModel):
    """A candidate who applied but holds no Selected application."""

    name: str
    email: str
    application_count: int


class SelectionReport(BaseModel):
    """Administrator reports over every application in the store."""

    chosen_per_course: list[ApplicationDisplay] = Field(default_factory=list)
    chosen_for_multiple_courses: list[MultiCourseCandidate] = Field(default_factory=list)
    not_chosen: list[UnselectedCandidate] = Field(default_factory=list)
