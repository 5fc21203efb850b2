"""
Per-course ranking of Selected applications.

Rankings are kept per (course_id, session_type) group. After every
operation the Selected applications of each touched group hold exactly
the ranks 1..n, and no other application holds a rank.

The manager never mutates its inputs. Each operation returns a
RankingResult with the updated collection and the records whose status
or ranking changed, which are the ones the caller must write back.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Iterable, Optional, Sequence, TypeVar

from pydantic import BaseModel

from teachteam.core.exceptions import InvalidRank
from teachteam.utils.constants import ApplicationStatus, SessionType

R = TypeVar("R", bound=BaseModel)

GroupKey = tuple[str, str]

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class RankingResult(Generic[R]):
    """Outcome of a ranking or status operation."""

    success: bool
    applications: list[R] = field(default_factory=list)
    changed: list[R] = field(default_factory=list)
    reason: Optional[str] = None
    application_id: Optional[str] = None
    rank: Optional[int] = None

    def __bool__(self) -> bool:
        return self.success

    def raise_for_failure(self) -> "RankingResult[R]":
        """Raise InvalidRank when the operation was refused."""
        if not self.success:
            raise InvalidRank(self.reason or "Invalid rank", self.application_id, self.rank)
        return self


def _key(application: Any) -> str:
    return str(application.id)


def _status(application: Any) -> str:
    return ApplicationStatus(application.status).value


def _is_selected(application: Any) -> bool:
    return _status(application) == ApplicationStatus.SELECTED.value


def group_key(application: Any) -> GroupKey:
    """The (course_id, session_type) pair an application is ranked within."""
    return (application.course_id, SessionType(application.session_type).value)


def _created_at(application: Any) -> datetime:
    created = getattr(application, "created_at", None)
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def _rank_order(application: Any) -> tuple[bool, int, datetime]:
    # ranked first by rank, then unranked by submission time
    ranking = application.ranking
    return (ranking is None, ranking or 0, _created_at(application))


def ordered_group(
    applications: Iterable[Any],
    key: GroupKey,
    exclude: Optional[str] = None,
) -> list[Any]:
    """Selected applications of one group in their current rank order."""
    members = [
        a for a in applications
        if _is_selected(a) and group_key(a) == key and _key(a) != exclude
    ]
    return sorted(members, key=_rank_order)


def group_rankings(applications: Iterable[Any]) -> dict[GroupKey, list[int]]:
    """Sorted rankings of the Selected applications in each group."""
    groups: dict[GroupKey, list[int]] = {}
    for application in applications:
        if _is_selected(application):
            groups.setdefault(group_key(application), []).append(application.ranking)
    return {
        key: sorted(ranks, key=lambda r: (r is None, r or 0))
        for key, ranks in groups.items()
    }


def is_contiguous(applications: Sequence[Any]) -> bool:
    """
    Check the ranking invariant over a collection.

    Every group's Selected ranks are exactly 1..n and applications that are
    not Selected carry no rank.
    """
    if any(not _is_selected(a) and a.ranking is not None for a in applications):
        return False
    return all(
        ranks == list(range(1, len(ranks) + 1))
        for ranks in group_rankings(applications).values()
    )


class RankingManager:
    """Moves, inserts and removes applications in a group's ranking."""

    def set_ranking(
        self,
        application_id: Any,
        new_rank: int,
        applications: Sequence[R],
    ) -> RankingResult[R]:
        """
        Move a Selected application to ``new_rank`` within its group.

        Applications between the old and new rank shift by one towards the
        vacated position. Refused when the target is missing or not
        Selected, or when ``new_rank`` is outside 1..n.
        """
        target_id = str(application_id)
        target = self._find(target_id, applications)
        if target is None:
            return self._refuse(applications, "Application not found", target_id, new_rank)
        if not _is_selected(target):
            return self._refuse(
                applications, "Only Selected applications can be ranked", target_id, new_rank
            )

        group = ordered_group(applications, group_key(target), exclude=target_id)
        size = len(group) + 1
        if not isinstance(new_rank, int) or isinstance(new_rank, bool) or not 1 <= new_rank <= size:
            return self._refuse(
                applications, f"Ranking must be between 1 and {size}", target_id, new_rank
            )

        group.insert(new_rank - 1, target)
        result = self._apply(applications, self._renumber(group))
        result.application_id, result.rank = target_id, new_rank
        return result

    def change_status(
        self,
        application_id: Any,
        status: ApplicationStatus,
        applications: Sequence[R],
        rank: Optional[int] = None,
    ) -> RankingResult[R]:
        """
        Change an application's status and keep its group contiguous.

        Selecting appends to the end of the group unless ``rank`` is given,
        in which case the application is inserted there. Leaving Selected
        clears the ranking and closes the gap it leaves.
        """
        target_id = str(application_id)
        status = ApplicationStatus(status)
        target = self._find(target_id, applications)
        if target is None:
            return self._refuse(applications, "Application not found", target_id, rank)

        key = group_key(target)
        was_selected = _is_selected(target)

        if status != ApplicationStatus.SELECTED:
            if rank is not None:
                return self._refuse(
                    applications, "Only Selected applications can be ranked", target_id, rank
                )
            updates: dict[str, dict[str, Any]] = {}
            if was_selected:
                updates = self._renumber(ordered_group(applications, key, exclude=target_id))
            updates[target_id] = {"status": status.value, "ranking": None}
            result = self._apply(applications, updates)
            result.application_id = target_id
            return result

        group = ordered_group(applications, key, exclude=target_id)
        if rank is None:
            if was_selected:
                current = ordered_group(applications, key)
                position = [_key(a) for a in current].index(target_id) + 1
            else:
                position = len(group) + 1
        else:
            position = rank
        if not isinstance(position, int) or not 1 <= position <= len(group) + 1:
            return self._refuse(
                applications, f"Ranking must be between 1 and {len(group) + 1}", target_id, rank
            )

        group.insert(position - 1, target)
        updates = self._renumber(group)
        updates[target_id]["status"] = status.value
        result = self._apply(applications, updates)
        result.application_id, result.rank = target_id, position
        return result

    def normalize_group(
        self,
        course_id: str,
        session_type: SessionType,
        applications: Sequence[R],
    ) -> RankingResult[R]:
        """
        Renumber one group to 1..n, repairing gaps and duplicates.

        Existing order is kept; unranked Selected applications go last in
        submission order. Stray ranks on other statuses are cleared.
        """
        key: GroupKey = (course_id, SessionType(session_type).value)
        updates = self._renumber(ordered_group(applications, key))
        for application in applications:
            if group_key(application) == key and not _is_selected(application) and application.ranking is not None:
                updates[_key(application)] = {"ranking": None}
        return self._apply(applications, updates)

    def normalize_all(self, applications: Sequence[R]) -> RankingResult[R]:
        """Renumber every group present in the collection."""
        result = RankingResult(success=True, applications=list(applications))
        keys = list(dict.fromkeys(group_key(a) for a in applications))
        for course_id, session_type in keys:
            step = self.normalize_group(course_id, session_type, result.applications)
            result.applications = step.applications
            result.changed = self._merge_changed(result.changed, step.changed)
        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _find(application_id: str, applications: Sequence[R]) -> Optional[R]:
        for application in applications:
            if _key(application) == application_id:
                return application
        return None

    @staticmethod
    def _renumber(group: list[Any]) -> dict[str, dict[str, Any]]:
        return {_key(a): {"ranking": position} for position, a in enumerate(group, start=1)}

    @staticmethod
    def _refuse(
        applications: Sequence[R],
        reason: str,
        application_id: Optional[str],
        rank: Optional[int],
    ) -> RankingResult[R]:
        return RankingResult(
            success=False,
            applications=list(applications),
            reason=reason,
            application_id=application_id,
            rank=rank,
        )

    @staticmethod
    def _apply(
        applications: Sequence[R],
        updates: dict[str, dict[str, Any]],
    ) -> RankingResult[R]:
        updated: list[R] = []
        changed: list[R] = []
        for application in applications:
            update = updates.get(_key(application))
            if not update:
                updated.append(application)
                continue
            before = (_status(application), application.ranking)
            after = (update.get("status", before[0]), update.get("ranking", before[1]))
            if before == after:
                updated.append(application)
                continue
            copy = application.model_copy(update=update)
            updated.append(copy)
            changed.append(copy)
        return RankingResult(success=True, applications=updated, changed=changed)

    @staticmethod
    def _merge_changed(first: list[R], second: list[R]) -> list[R]:
        merged = {_key(a): a for a in first}
        merged.update({_key(a): a for a in second})
        return list(merged.values())
