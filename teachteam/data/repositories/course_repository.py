"""
Course repository for TeachTeam.

Catalog lookups used to decorate applications, and lecturer assignment
queries.
"""

from typing import Optional

from teachteam.core.exceptions import PersistenceFailure
from teachteam.data.models.course import Course, CourseCreate, CourseDetails
from teachteam.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class CourseRepository(BaseRepository[Course]):
    """Repository for course document operations."""

    @property
    def collection_name(self) -> str:
        return "courses"

    @property
    def model_class(self) -> type[Course]:
        return Course

    def create_course(self, data: CourseCreate) -> Course:
        """Add a course to the catalog."""
        return self.create(data.to_document())

    def get_by_code(self, code: str) -> Optional[Course]:
        """Get a course by its code (e.g. COSC2758)."""
        return self.find_one({"code": code.strip().upper()})

    def find_course(self, course_id: str) -> Optional[Course]:
        """Resolve a course by document id, falling back to its code."""
        if not course_id:
            return None
        course = self.get_by_id(course_id)
        if course is None:
            course = self.get_by_code(course_id)
        return course

    def get_course_details(self, course_id: str) -> CourseDetails:
        """
        Code and name for a course id.

        Never raises: unknown ids and store failures both degrade to
        placeholder details so the applicant list still renders.
        """
        try:
            details = CourseDetails.from_course(self.find_course(course_id))
        except PersistenceFailure as e:
            logger.warning(f"Course lookup for {course_id!r} degraded: {e}")
            details = None
        if details is None:
            logger.debug(f"Course {course_id!r} not in catalog")
            return CourseDetails.placeholder(course_id)
        return details

    def get_for_lecturer(self, lecturer_email: str) -> list[Course]:
        """Courses a lecturer is assigned to."""
        return self.find({"lecturer_emails": lecturer_email.strip().lower()}, sort=[("code", 1)])

    def assign_lecturer(self, course_id: str, lecturer_email: str) -> bool:
        """Assign a lecturer to a course."""
        course = self.find_course(course_id)
        if course is None:
            return False
        with self._guard("assign_lecturer"):
            result = self._get_sync_collection().update_one(
                {"_id": course.id}, {"$addToSet": {"lecturer_emails": lecturer_email.strip().lower()}}
            )
        return result.matched_count > 0


# Singleton instance
_course_repository: Optional[CourseRepository] = None


def get_course_repository() -> CourseRepository:
    """Get the course repository singleton instance."""
    global _course_repository
    if _course_repository is None:
        _course_repository = CourseRepository()
    return _course_repository
