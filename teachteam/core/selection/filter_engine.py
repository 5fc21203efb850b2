"""
Applicant search and ordering.

Pure functions over display records: no I/O, inputs are never mutated,
and the same arguments always give the same result.
"""

from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from teachteam.data.models import ApplicationDisplay, SearchCriteria
from teachteam.utils.constants import Availability, SortDirection, SortField

Criteria = Union[SearchCriteria, Mapping[str, Any], None]


def _as_criteria(criteria: Criteria) -> SearchCriteria:
    if criteria is None:
        return SearchCriteria()
    if isinstance(criteria, SearchCriteria):
        return criteria
    return SearchCriteria.model_validate(dict(criteria))


def _contains(haystack: str, needle: str) -> bool:
    return needle in (haystack or "").lower()


def matches(application: ApplicationDisplay, criteria: Criteria) -> bool:
    """Check one record against every specified criterion."""
    active = _as_criteria(criteria).active()

    course = active.get("course_name")
    if course is not None:
        term = course.lower()
        if not (_contains(application.course_code, term) or _contains(application.course_name, term)):
            return False

    name = active.get("candidate_name")
    if name is not None and not _contains(application.candidate_name, name.lower()):
        return False

    availability = active.get("availability")
    if availability is not None and application.availability != availability:
        return False

    skill = active.get("skill_set")
    if skill is not None:
        term = skill.lower()
        if not any(_contains(s, term) for s in application.skills):
            return False

    session_type = active.get("session_type")
    if session_type is not None and application.session_type != session_type:
        return False

    return True


def filter_applications(
    applications: Iterable[ApplicationDisplay],
    criteria: Criteria = None,
) -> Iterator[ApplicationDisplay]:
    """
    Lazily narrow applications to those matching the search criteria.

    Criteria are AND-ed; blank criteria impose no constraint. With nothing
    specified every application is yielded in its original order.
    """
    criteria = _as_criteria(criteria)
    if criteria.is_empty:
        yield from applications
        return
    for application in applications:
        if matches(application, criteria):
            yield application


def search_applications(
    applications: Iterable[ApplicationDisplay],
    criteria: Criteria = None,
    sort_by: SortField = SortField.NONE,
    direction: SortDirection = SortDirection.ASC,
) -> list[ApplicationDisplay]:
    """Filter then sort, materialized as a list."""
    return sort_applications(filter_applications(applications, criteria), sort_by, direction)


def _availability_key(application: ApplicationDisplay) -> int:
    # fulltime sorts ahead of parttime
    return 0 if application.availability == Availability.FULLTIME.value else 1


def sort_applications(
    applications: Iterable[ApplicationDisplay],
    sort_by: Optional[SortField] = SortField.NONE,
    direction: SortDirection = SortDirection.ASC,
) -> list[ApplicationDisplay]:
    """
    Order applications for the applicant list.

    The sort is stable, so records that compare equal keep their input
    order in both directions.
    """
    items = list(applications)
    field = SortField(sort_by or SortField.NONE)
    if field == SortField.NONE:
        return items

    if field == SortField.COURSE_NAME:
        key: Any = lambda a: a.course_name.casefold()
    elif field == SortField.CANDIDATE_NAME:
        key = lambda a: a.candidate_name.casefold()
    else:
        key = _availability_key

    reverse = SortDirection(direction) == SortDirection.DESC
    return sorted(items, key=key, reverse=reverse)
