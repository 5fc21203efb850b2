"""
Join stored applications with course and candidate metadata.

The adapter never fails on a dangling reference: unknown courses and
candidates are shown with placeholder values so the review screen still
renders.
"""

from typing import Callable, Iterable, Optional

from teachteam.core.exceptions import NotFound
from teachteam.data.models import (
    Application,
    ApplicationDisplay,
    Candidate,
    Course,
    CourseDetails,
)
from teachteam.utils.constants import UNKNOWN_CANDIDATE_NAME
from teachteam.utils.logger import get_logger

logger = get_logger(__name__)

CourseLookup = Callable[[str], Optional[CourseDetails]]
UserLookup = Callable[[str], Optional[Candidate]]


def get_course_details(course_id: str, catalog: Iterable[Course]) -> CourseDetails:
    """Find a course in an in-memory catalog by id, then by code."""
    if not course_id:
        return CourseDetails.placeholder(course_id)
    courses = list(catalog)
    for course in courses:
        if course.id_str == course_id:
            return CourseDetails.from_course(course)
    for course in courses:
        if course.code == course_id:
            return CourseDetails.from_course(course)
    return CourseDetails.placeholder(course_id)


def to_display(
    application: Application,
    course: Optional[CourseDetails],
    candidate: Optional[Candidate],
) -> ApplicationDisplay:
    """Flatten one application with already resolved metadata."""
    if course is None:
        course = CourseDetails.placeholder(application.course_id)
    candidate_name = candidate.name if candidate and candidate.name else UNKNOWN_CANDIDATE_NAME

    return ApplicationDisplay(
        id=application.id_str,
        candidate_name=candidate_name,
        candidate_email=application.candidate_email,
        course_id=application.course_id,
        course_code=course.code,
        course_name=course.name,
        session_type=application.session_type,
        skills=list(application.skills),
        availability=application.availability,
        status=application.status,
        ranking=application.ranking,
        comments=list(application.comments),
        created_at=application.created_at,
        academic_credentials=list(application.academic_credentials),
        previous_roles=list(application.previous_roles),
    )


class DisplayAdapter:
    """
    Build display records using pluggable course and candidate lookups.

    Lookups are memoized per ``adapt_many`` call, so a course list with
    fifty applicants costs one lookup per distinct course and candidate.
    """

    def __init__(self, course_lookup: CourseLookup, user_lookup: UserLookup):
        self._course_lookup = course_lookup
        self._user_lookup = user_lookup

    @classmethod
    def from_catalog(
        cls,
        courses: Iterable[Course],
        candidates: Iterable[Candidate] = (),
    ) -> "DisplayAdapter":
        """Adapter over in-memory course and candidate lists."""
        catalog = list(courses)
        by_email = {str(c.email).lower(): c for c in candidates}
        return cls(
            course_lookup=lambda course_id: get_course_details(course_id, catalog),
            user_lookup=lambda email: by_email.get((email or "").lower()),
        )

    def _resolve_course(self, course_id: str) -> CourseDetails:
        try:
            details = self._course_lookup(course_id)
        except NotFound:
            details = None
        if details is None or not details.found:
            logger.debug(f"Course {course_id!r} not found, using placeholder")
        return details or CourseDetails.placeholder(course_id)

    def _resolve_candidate(self, email: str) -> Optional[Candidate]:
        try:
            candidate = self._user_lookup(email)
        except NotFound:
            candidate = None
        if candidate is None:
            logger.debug(f"Candidate {email!r} not found, using placeholder")
        return candidate

    def adapt(self, application: Application) -> ApplicationDisplay:
        """Build the display record for one application."""
        return to_display(
            application,
            self._resolve_course(application.course_id),
            self._resolve_candidate(application.candidate_email),
        )

    def adapt_many(self, applications: Iterable[Application]) -> list[ApplicationDisplay]:
        """Build display records, preserving input order."""
        courses: dict[str, CourseDetails] = {}
        candidates: dict[str, Optional[Candidate]] = {}
        displays = []
        for application in applications:
            if application.course_id not in courses:
                courses[application.course_id] = self._resolve_course(application.course_id)
            email = application.candidate_email
            if email not in candidates:
                candidates[email] = self._resolve_candidate(email)
            displays.append(to_display(application, courses[application.course_id], candidates[email]))
        return displays
