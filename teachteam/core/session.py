"""
Explicit reviewer session context.

Passed to the selection service instead of being read from ambient
storage; the pure selection functions never see it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from teachteam.data.models.base import utc_now
from teachteam.utils.constants import UserRole
from teachteam.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ReviewerSession:
    """Who is reviewing, which courses they may act on, and whether they are signed in."""

    email: str
    role: UserRole
    course_ids: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime = field(default_factory=utc_now)
    active: bool = True

    @classmethod
    def login(
        cls,
        email: str,
        role: UserRole | str,
        course_ids: Optional[Iterable[str]] = None,
    ) -> "ReviewerSession":
        """Start a session for a signed-in user."""
        session = cls(
            email=email.strip().lower(),
            role=UserRole(role),
            course_ids=frozenset(course_ids or ()),
        )
        logger.info(f"Session started for {session.email} ({session.role.value})")
        return session

    def logout(self) -> None:
        self.active = False
        logger.info(f"Session ended for {self.email}")

    def require_active(self) -> None:
        if not self.active:
            raise PermissionError("Session has ended; sign in again")

    def can_review(self, course_id: str) -> bool:
        """
        Whether this session may change applications for a course.

        Administrators may act on any course, lecturers only on the courses
        assigned to them, candidates on none.
        """
        if not self.active:
            return False
        if self.role == UserRole.ADMIN:
            return True
        if self.role == UserRole.LECTURER:
            return course_id in self.course_ids
        return False

    def require_course(self, course_id: str) -> None:
        """Raise PermissionError unless this session may review ``course_id``."""
        self.require_active()
        if not self.can_review(course_id):
            raise PermissionError(f"{self.email} may not review course {course_id}")
