"""
Selection statistics for the applicant review screen.

Everything here is a pure function of the collection passed in, so the
numbers can be recomputed from the filtered list after every change.
"""

from collections import Counter
from typing import Iterable, Optional

from teachteam.data.models import (
    ApplicantRef,
    ApplicationDisplay,
    CourseStatistics,
    MultiCourseCandidate,
    SelectionCount,
    SelectionReport,
    Statistics,
    UnselectedCandidate,
)
from teachteam.utils.constants import (
    MULTIPLE_COURSES_THRESHOLD,
    ApplicationStatus,
    Availability,
    SessionType,
)


def _selection_counts(applications: list[ApplicationDisplay]) -> Counter:
    # Counter keeps first-insertion order, which breaks ties below
    return Counter(
        a.candidate_name for a in applications if a.status == ApplicationStatus.SELECTED
    )


def _most_selected(counts: Counter) -> Optional[SelectionCount]:
    best = None
    for name, count in counts.items():
        if best is None or count > best[1]:
            best = (name, count)
    return SelectionCount(name=best[0], count=best[1]) if best else None


def _least_selected(counts: Counter) -> Optional[SelectionCount]:
    worst = None
    for name, count in counts.items():
        if worst is None or count < worst[1]:
            worst = (name, count)
    return SelectionCount(name=worst[0], count=worst[1]) if worst else None


def aggregate(applications: Iterable[ApplicationDisplay]) -> Statistics:
    """
    Summarize a collection of applications.

    most_selected and least_selected group Selected applications by
    candidate name; ties go to the name seen first. unselected_applicants
    lists every application that is not Selected, in input order.
    """
    items = list(applications)
    statuses = Counter(ApplicationStatus(a.status) for a in items)
    counts = _selection_counts(items)

    return Statistics(
        total_applicants=len(items),
        selected_count=statuses[ApplicationStatus.SELECTED],
        pending_count=statuses[ApplicationStatus.PENDING],
        rejected_count=statuses[ApplicationStatus.REJECTED],
        most_selected=_most_selected(counts),
        least_selected=_least_selected(counts),
        unselected_applicants=[
            ApplicantRef(name=a.candidate_name)
            for a in items
            if a.status != ApplicationStatus.SELECTED
        ],
    )


def aggregate_course(applications: Iterable[ApplicationDisplay]) -> CourseStatistics:
    """Statistics plus role and availability breakdowns for one course."""
    items = list(applications)
    base = aggregate(items)
    roles = Counter(SessionType(a.session_type) for a in items)
    availability = Counter(Availability(a.availability) for a in items)

    return CourseStatistics(
        **base.model_dump(),
        tutor_count=roles[SessionType.TUTOR],
        lab_assistant_count=roles[SessionType.LAB_ASSISTANT],
        fulltime_count=availability[Availability.FULLTIME],
        parttime_count=availability[Availability.PARTTIME],
    )


# -----------------------------------------------------------------------------
# Administrator reports
# -----------------------------------------------------------------------------


def _by_candidate(applications: Iterable[ApplicationDisplay]) -> dict[str, list[ApplicationDisplay]]:
    """Group applications by candidate email, in first-seen order."""
    groups: dict[str, list[ApplicationDisplay]] = {}
    for application in applications:
        groups.setdefault(application.candidate_email.lower(), []).append(application)
    return groups


def chosen_per_course(applications: Iterable[ApplicationDisplay]) -> list[ApplicationDisplay]:
    """Selected applications ordered by course code, then by ranking."""
    selected = [a for a in applications if a.status == ApplicationStatus.SELECTED]
    return sorted(selected, key=lambda a: (a.course_code, a.ranking is None, a.ranking or 0))


def chosen_for_multiple_courses(
    applications: Iterable[ApplicationDisplay],
    threshold: int = MULTIPLE_COURSES_THRESHOLD,
) -> list[MultiCourseCandidate]:
    """Candidates with more than ``threshold`` Selected applications."""
    selected = [a for a in applications if a.status == ApplicationStatus.SELECTED]
    return [
        MultiCourseCandidate(
            name=group[0].candidate_name,
            email=email,
            course_count=len(group),
            courses=[f"{a.course_code} - {a.course_name}" for a in group],
        )
        for email, group in _by_candidate(selected).items()
        if len(group) > threshold
    ]


def not_chosen(applications: Iterable[ApplicationDisplay]) -> list[UnselectedCandidate]:
    """Candidates who applied at least once and hold no Selected application."""
    return [
        UnselectedCandidate(
            name=group[0].candidate_name,
            email=email,
            application_count=len(group),
        )
        for email, group in _by_candidate(applications).items()
        if not any(a.status == ApplicationStatus.SELECTED for a in group)
    ]


def selection_report(applications: Iterable[ApplicationDisplay]) -> SelectionReport:
    """All three administrator reports over one collection."""
    items = list(applications)
    return SelectionReport(
        chosen_per_course=chosen_per_course(items),
        chosen_for_multiple_courses=chosen_for_multiple_courses(items),
        not_chosen=not_chosen(items),
    )
