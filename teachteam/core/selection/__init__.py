"""
Applicant selection core.

Display adapter, filter engine, ranking manager and statistics aggregator,
plus the service that runs them against the application store.
"""

from .display_adapter import DisplayAdapter, get_course_details, to_display
from .filter_engine import (
    filter_applications,
    matches,
    search_applications,
    sort_applications,
)
from .ranking_manager import RankingManager, RankingResult, is_contiguous
from .service import SelectionService, get_selection_service
from .statistics import (
    aggregate,
    aggregate_course,
    chosen_for_multiple_courses,
    chosen_per_course,
    not_chosen,
    selection_report,
)

__all__ = [
    "DisplayAdapter",
    "get_course_details",
    "to_display",
    "filter_applications",
    "matches",
    "search_applications",
    "sort_applications",
    "RankingManager",
    "RankingResult",
    "is_contiguous",
    "SelectionService",
    "get_selection_service",
    "aggregate",
    "aggregate_course",
    "chosen_for_multiple_courses",
    "chosen_per_course",
    "not_chosen",
    "selection_report",
]
