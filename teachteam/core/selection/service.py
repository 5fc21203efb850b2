"""
Selection service.

Request-level entry point for the review screens: loads applications from
the store, runs the pure selection core over them and writes the records
a mutation changed back to the store.
"""

from typing import Any, Iterable, Optional, Protocol, Sequence

from teachteam.core.exceptions import NotFound
from teachteam.core.session import ReviewerSession
from teachteam.data.models import (
    Application,
    ApplicationDisplay,
    CandidateUnavailable,
    CommentCreate,
    CourseStatistics,
    SelectionReport,
    Statistics,
)
from teachteam.data.repositories import (
    get_application_repository,
    get_candidate_repository,
    get_course_repository,
)
from teachteam.utils.config import get_settings
from teachteam.utils.constants import (
    ApplicationStatus,
    AuditAction,
    SessionType,
    SortDirection,
    SortField,
    UserRole,
)
from teachteam.utils.logger import LoggerMixin, audit_log

from .display_adapter import CourseLookup, DisplayAdapter, UserLookup
from .filter_engine import Criteria, search_applications
from .ranking_manager import RankingManager, RankingResult
from .statistics import aggregate, aggregate_course, selection_report


class ApplicationStore(Protocol):
    """What the service needs from the application store."""

    def get_by_id(self, id_value: Any) -> Optional[Application]: ...

    def get_applications_for_course(
        self, course_id: str, session_type: Optional[SessionType] = None
    ) -> list[Application]: ...

    async def get_applications_for_course_async(
        self, course_id: str, session_type: Optional[SessionType] = None
    ) -> list[Application]: ...

    def get_applications_for_courses(self, course_ids: Sequence[str]) -> list[Application]: ...

    def get_all_applications(self, limit: int = 0) -> list[Application]: ...

    def apply_rankings(self, applications: Sequence[Application]) -> int: ...

    def add_comment(self, id_value: Any, text: str) -> Optional[list[str]]: ...


class CandidateStore(Protocol):
    def set_blocked(
        self, email: str, blocked: bool, reason: Optional[str] = None
    ) -> Optional[CandidateUnavailable]: ...


class SelectionService(LoggerMixin):
    """
    Orchestrates searching, ranking and statistics for reviewers.

    Every mutating call re-reads the target's (course, role) group, lets the
    RankingManager compute the new state and writes only the changed
    records back. No state is kept between calls.
    """

    def __init__(
        self,
        store: ApplicationStore,
        course_lookup: CourseLookup,
        user_lookup: UserLookup,
        manager: Optional[RankingManager] = None,
        candidates: Optional[CandidateStore] = None,
        strict: Optional[bool] = None,
    ):
        settings = get_settings().selection
        self.store = store
        self.adapter = DisplayAdapter(course_lookup, user_lookup)
        self.manager = manager or RankingManager()
        self.candidates = candidates
        self.strict = settings.strict_ranking if strict is None else strict
        self.list_limit = settings.list_limit

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _load(
        self,
        course_id: Optional[str],
        session: Optional[ReviewerSession],
    ) -> list[Application]:
        if session is not None:
            session.require_active()
        if course_id:
            if session is not None:
                session.require_course(course_id)
            return self.store.get_applications_for_course(course_id)
        if session is not None and session.role != UserRole.ADMIN:
            return self.store.get_applications_for_courses(sorted(session.course_ids))
        return self.store.get_all_applications(self.list_limit)

    def list_applications(
        self,
        criteria: Criteria = None,
        sort_by: SortField = SortField.NONE,
        direction: SortDirection = SortDirection.ASC,
        course_id: Optional[str] = None,
        session: Optional[ReviewerSession] = None,
    ) -> list[ApplicationDisplay]:
        """
        Applicant list as shown on the review screen.

        Lecturers see only their assigned courses; administrators and
        sessionless callers (the CLI) see everything up to the list limit.
        """
        displays = self.adapter.adapt_many(self._load(course_id, session))
        return search_applications(displays, criteria, sort_by, direction)

    async def list_course_applications_async(
        self,
        course_id: str,
        criteria: Criteria = None,
        session: Optional[ReviewerSession] = None,
    ) -> list[ApplicationDisplay]:
        """Applicant list for one course using the async store."""
        if session is not None:
            session.require_course(course_id)
        applications = await self.store.get_applications_for_course_async(course_id)
        return search_applications(self.adapter.adapt_many(applications), criteria)

    def get_application(self, application_id: str) -> ApplicationDisplay:
        return self.adapter.adapt(self._target(application_id))

    def statistics(self, applications: Iterable[ApplicationDisplay]) -> Statistics:
        """Statistics for an already loaded (possibly filtered) list."""
        return aggregate(applications)

    def refresh_statistics(
        self,
        criteria: Criteria = None,
        course_id: Optional[str] = None,
        session: Optional[ReviewerSession] = None,
    ) -> Statistics:
        """Reload from the store and recompute statistics."""
        return aggregate(self.list_applications(criteria, course_id=course_id, session=session))

    def course_statistics(
        self,
        course_id: str,
        session: Optional[ReviewerSession] = None,
    ) -> CourseStatistics:
        return aggregate_course(self.list_applications(course_id=course_id, session=session))

    def selection_report(self, session: Optional[ReviewerSession] = None) -> SelectionReport:
        """Administrator reports over every application, ignoring the list limit."""
        if session is not None:
            session.require_active()
            if session.role != UserRole.ADMIN:
                raise PermissionError("Only administrators can view selection reports")
        displays = self.adapter.adapt_many(self.store.get_all_applications(0))
        return selection_report(displays)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _target(self, application_id: str) -> Application:
        application = self.store.get_by_id(application_id)
        if application is None:
            raise NotFound("Application", str(application_id))
        return application

    def _group_for(self, application: Application) -> list[Application]:
        return self.store.get_applications_for_course(
            application.course_id, SessionType(application.session_type)
        )

    def _check(self, course_id: str, session: Optional[ReviewerSession]) -> None:
        if session is not None:
            session.require_course(course_id)

    def _commit(
        self,
        result: RankingResult[Application],
        strict: Optional[bool],
    ) -> RankingResult[Application]:
        if not result:
            if self.strict if strict is None else strict:
                result.raise_for_failure()
            self.logger.warning(
                f"Ranking change refused for {result.application_id}: {result.reason}"
            )
            return result
        if result.changed:
            written = self.store.apply_rankings(result.changed)
            if written != len(result.changed):
                self.logger.warning(
                    f"Expected to write {len(result.changed)} applications, matched {written}"
                )
        return result

    def set_ranking(
        self,
        application_id: str,
        new_rank: int,
        session: Optional[ReviewerSession] = None,
        strict: Optional[bool] = None,
    ) -> RankingResult[Application]:
        """
        Move a Selected application to a new rank in its course group.

        Returns a falsy result on an out-of-range rank or a non-Selected
        target; raises InvalidRank instead when strict.
        """
        target = self._target(application_id)
        self._check(target.course_id, session)
        result = self._commit(
            self.manager.set_ranking(application_id, new_rank, self._group_for(target)),
            strict,
        )
        if result:
            audit_log(
                AuditAction.CANDIDATE_RANKED.value,
                {
                    "application_id": str(application_id),
                    "course_id": target.course_id,
                    "session_type": SessionType(target.session_type).value,
                    "from_rank": target.ranking,
                    "to_rank": new_rank,
                    "reviewer": session.email if session else None,
                },
            )
        return result

    def change_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        rank: Optional[int] = None,
        session: Optional[ReviewerSession] = None,
        strict: Optional[bool] = None,
    ) -> RankingResult[Application]:
        """Change status, keeping the group's rankings contiguous."""
        status = ApplicationStatus(status)
        target = self._target(application_id)
        self._check(target.course_id, session)
        result = self._commit(
            self.manager.change_status(application_id, status, self._group_for(target), rank),
            strict,
        )
        if result:
            audit_log(
                AuditAction.CANDIDATE_STATUS_CHANGED.value,
                {
                    "application_id": str(application_id),
                    "course_id": target.course_id,
                    "from_status": ApplicationStatus(target.status).value,
                    "to_status": status.value,
                    "ranking": result.rank if status == ApplicationStatus.SELECTED else None,
                    "reviewer": session.email if session else None,
                },
            )
        return result

    def select(self, application_id: str, rank: Optional[int] = None, **kwargs: Any) -> RankingResult[Application]:
        return self.change_status(application_id, ApplicationStatus.SELECTED, rank, **kwargs)

    def reject(self, application_id: str, **kwargs: Any) -> RankingResult[Application]:
        return self.change_status(application_id, ApplicationStatus.REJECTED, **kwargs)

    def reset(self, application_id: str, **kwargs: Any) -> RankingResult[Application]:
        return self.change_status(application_id, ApplicationStatus.PENDING, **kwargs)

    def add_comment(
        self,
        application_id: str,
        text: str,
        session: Optional[ReviewerSession] = None,
    ) -> list[str]:
        """
        Append a reviewer comment and return the full comment list.

        Raises ValueError (pydantic ValidationError) for comments outside
        the allowed length and NotFound for an unknown application.
        """
        comment = CommentCreate(comment=text)
        target = self._target(application_id)
        self._check(target.course_id, session)
        comments = self.store.add_comment(application_id, comment.comment)
        if comments is None:
            raise NotFound("Application", str(application_id))
        audit_log(
            AuditAction.COMMENT_ADDED.value,
            {
                "application_id": str(application_id),
                "course_id": target.course_id,
                "length": len(comment.comment),
                "reviewer": session.email if session else None,
            },
            audit_type="COMMENT",
        )
        return comments

    def normalize_course(
        self,
        course_id: str,
        session_type: Optional[SessionType] = None,
        session: Optional[ReviewerSession] = None,
    ) -> RankingResult[Application]:
        """Repair rankings of one course (one role or both) to 1..n."""
        self._check(course_id, session)
        applications = self.store.get_applications_for_course(course_id, session_type)
        if session_type is None:
            result = self.manager.normalize_all(applications)
        else:
            result = self.manager.normalize_group(course_id, session_type, applications)
        self._commit(result, strict=False)
        if result.changed:
            audit_log(
                AuditAction.RANKS_NORMALIZED.value,
                {"course_id": course_id, "changed": len(result.changed)},
            )
        return result

    def mark_unavailable(
        self,
        candidate_email: str,
        reason: Optional[str] = None,
        session: Optional[ReviewerSession] = None,
    ) -> Optional[CandidateUnavailable]:
        """Block a candidate and return the notification payload for lecturers."""
        if session is not None:
            session.require_active()
            if session.role != UserRole.ADMIN:
                raise PermissionError("Only administrators can block candidates")
        if self.candidates is None:
            raise RuntimeError("No candidate store configured")
        event = self.candidates.set_blocked(candidate_email, True, reason)
        if event is not None:
            audit_log(
                AuditAction.CANDIDATE_UNAVAILABLE.value,
                event.model_dump(mode="json"),
                audit_type="ACCESS",
            )
        return event


def get_selection_service() -> SelectionService:
    """Build a SelectionService over the MongoDB repositories."""
    courses = get_course_repository()
    candidates = get_candidate_repository()
    return SelectionService(
        store=get_application_repository(),
        course_lookup=courses.get_course_details,
        user_lookup=candidates.get_user_data,
        candidates=candidates,
    )
