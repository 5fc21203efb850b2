"""
Application-wide constants for TeachTeam.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

import re
from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "teachteam"
APP_DISPLAY_NAME: Final[str] = "TeachTeam Tutor Selection"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Display Placeholders
# =============================================================================

UNKNOWN_CANDIDATE_NAME: Final[str] = "Unknown Candidate"
UNKNOWN_COURSE_CODE: Final[str] = "Unknown"
COURSE_NOT_IN_CATALOG: Final[str] = "Course not in catalog"

# Four capital letters followed by four digits, e.g. COSC2758
COURSE_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Z]{4}\d{4}$")

# New catalog entries must belong to the COSC programme
CATALOG_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^COSC\d{4}$")


# =============================================================================
# Validation Limits
# =============================================================================

COMMENT_MIN_LENGTH: Final[int] = 3
COMMENT_MAX_LENGTH: Final[int] = 500
COURSE_NAME_MIN_LENGTH: Final[int] = 3
CREDENTIAL_MIN_YEAR: Final[int] = 1950
GPA_RANGE: Final[tuple[float, float]] = (0.0, 4.0)


# =============================================================================
# Reports
# =============================================================================

# Candidates selected for more than this many courses are listed separately
MULTIPLE_COURSES_THRESHOLD: Final[int] = 3


# =============================================================================
# Enums
# =============================================================================


class ApplicationStatus(str, Enum):
    """Review status of an application."""

    PENDING = "Pending"
    SELECTED = "Selected"
    REJECTED = "Rejected"


class SessionType(str, Enum):
    """Role a candidate applies for within a course."""

    TUTOR = "tutor"
    LAB_ASSISTANT = "lab_assistant"


class Availability(str, Enum):
    """Candidate availability."""

    FULLTIME = "fulltime"
    PARTTIME = "parttime"


class UserRole(str, Enum):
    """Roles a session can be opened with."""

    CANDIDATE = "candidate"
    LECTURER = "lecturer"
    ADMIN = "admin"


class SortField(str, Enum):
    """Fields the applicant list can be ordered by."""

    NONE = "none"
    COURSE_NAME = "course_name"
    CANDIDATE_NAME = "candidate_name"
    AVAILABILITY = "availability"


class SortDirection(str, Enum):
    """Sort direction for the applicant list."""

    ASC = "asc"
    DESC = "desc"


class AuditAction(str, Enum):
    """Types of actions that can be audited."""

    CANDIDATE_RANKED = "candidate_ranked"
    CANDIDATE_STATUS_CHANGED = "candidate_status_changed"
    COMMENT_ADDED = "comment_added"
    RANKS_NORMALIZED = "ranks_normalized"
    CANDIDATE_UNAVAILABLE = "candidate_unavailable"
