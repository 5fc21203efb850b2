"""
Application repository for TeachTeam.

The application store: reads applications by course, candidate and
status, and writes back status, ranking and comment changes made during
review.
"""

from typing import Any, Optional, Sequence

from bson import ObjectId
from pymongo import UpdateOne

from teachteam.core.exceptions import DuplicateApplication
from teachteam.data.models.application import Application, ApplicationCreate
from teachteam.data.models.base import utc_now
from teachteam.utils.constants import ApplicationStatus, SessionType
from teachteam.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


def _by_ranking(applications: list[Application]) -> list[Application]:
    """Order by ranking with unranked applications last."""
    return sorted(applications, key=lambda a: (a.ranking is None, a.ranking or 0))


class ApplicationRepository(BaseRepository[Application]):
    """Repository for application document operations."""

    @property
    def collection_name(self) -> str:
        return "applications"

    @property
    def model_class(self) -> type[Application]:
        return Application

    # -------------------------------------------------------------------------
    # Create Operations
    # -------------------------------------------------------------------------

    def submit(self, data: ApplicationCreate) -> Application:
        """Store a new Pending application; one per candidate, course and role."""
        if self.exists(
            {
                "candidate_email": str(data.candidate_email),
                "course_id": data.course_id,
                "session_type": data.session_type.value,
            }
        ):
            raise DuplicateApplication("You have already applied for this position")
        application = self.create(data.to_document())
        logger.info(
            f"Application {application.id} submitted for course {data.course_id} "
            f"({data.session_type.value})"
        )
        return application

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def get_applications_for_course(
        self,
        course_id: str,
        session_type: Optional[SessionType] = None,
    ) -> list[Application]:
        """Get every application to a course, optionally for one role."""
        query: dict[str, Any] = {"course_id": course_id}
        if session_type:
            query["session_type"] = SessionType(session_type).value
        return self.find(query)

    async def get_applications_for_course_async(
        self,
        course_id: str,
        session_type: Optional[SessionType] = None,
    ) -> list[Application]:
        """Get every application to a course asynchronously."""
        query: dict[str, Any] = {"course_id": course_id}
        if session_type:
            query["session_type"] = SessionType(session_type).value
        return await self.find_async(query)

    def get_applications_for_courses(self, course_ids: Sequence[str]) -> list[Application]:
        """Get applications across several courses (a lecturer's load)."""
        if not course_ids:
            return []
        return self.find({"course_id": {"$in": list(course_ids)}})

    def get_all_applications(self, limit: int = 0) -> list[Application]:
        """Get all applications, newest first."""
        return self.find({}, limit=limit)

    def get_selected_applications(self, course_id: Optional[str] = None) -> list[Application]:
        """Get Selected applications ordered by ranking."""
        query: dict[str, Any] = {"status": ApplicationStatus.SELECTED.value}
        if course_id:
            query["course_id"] = course_id
        return _by_ranking(self.find(query))

    # -------------------------------------------------------------------------
    # Update Operations
    # -------------------------------------------------------------------------

    def update_application_status(
        self, id_value: str | ObjectId, status: ApplicationStatus
    ) -> bool:
        """
        Set an application's status.

        Leaving Selected also clears the ranking; compacting the rest of
        the group is the caller's job.
        """
        status = ApplicationStatus(status)
        update: dict[str, Any] = {"status": status.value}
        if status != ApplicationStatus.SELECTED:
            update["ranking"] = None
        return self.update_fields(id_value, update)

    def update_application_ranking(self, id_value: str | ObjectId, rank: Optional[int]) -> bool:
        """Set or clear a single application's ranking."""
        if rank is not None and rank < 1:
            return False
        return self.update_fields(id_value, {"ranking": rank})

    def add_comment(self, id_value: str | ObjectId, text: str) -> Optional[list[str]]:
        """Append a comment; returns the full comment list or None if missing."""
        if not self._is_object_id(id_value):
            return None
        with self._guard("add_comment"):
            result = self._get_sync_collection().update_one(
                {"_id": self._to_object_id(id_value)},
                {"$push": {"comments": text}, "$set": {"updated_at": utc_now()}},
            )
        if result.matched_count == 0:
            return None
        application = self.get_by_id(id_value)
        return application.comments if application else None

    def apply_rankings(self, applications: Sequence[Application]) -> int:
        """
        Write status and ranking for several applications in one batch.

        Returns the number of documents matched.
        """
        if not applications:
            return 0
        now = utc_now()
        operations = [
            UpdateOne(
                {"_id": self._to_object_id(app.id)},
                {"$set": {"status": ApplicationStatus(app.status).value, "ranking": app.ranking, "updated_at": now}},
            )
            for app in applications
        ]
        with self._guard("apply_rankings"):
            result = self._get_sync_collection().bulk_write(operations, ordered=True)
        logger.debug(f"Wrote rankings for {result.matched_count} applications")
        return result.matched_count


# Singleton instance
_application_repository: Optional[ApplicationRepository] = None


def get_application_repository() -> ApplicationRepository:
    """Get the application repository singleton instance."""
    global _application_repository
    if _application_repository is None:
        _application_repository = ApplicationRepository()
    return _application_repository
