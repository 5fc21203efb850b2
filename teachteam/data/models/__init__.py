"""
Pydantic data models and schemas for TeachTeam.

This module provides all data models used throughout the application,
including database documents, embedded models, derived views and
boundary schemas.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, PyObjectId, TimestampMixin, utc_now

# Application models
from .application import (
    AcademicCredential,
    Application,
    ApplicationCreate,
    ApplicationStatusUpdate,
    CommentCreate,
    PreviousRole,
    RankingUpdate,
)

# Course models
from .course import Course, CourseCreate, CourseDetails

# Candidate models
from .candidate import Candidate

# Derived views
from .display import (
    ApplicantRef,
    ApplicationDisplay,
    CandidateUnavailable,
    CourseStatistics,
    MultiCourseCandidate,
    SearchCriteria,
    SelectionCount,
    SelectionReport,
    Statistics,
    UnselectedCandidate,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "TimestampMixin",
    "utc_now",
    # Application
    "AcademicCredential",
    "Application",
    "ApplicationCreate",
    "ApplicationStatusUpdate",
    "CommentCreate",
    "PreviousRole",
    "RankingUpdate",
    # Course
    "Course",
    "CourseCreate",
    "CourseDetails",
    # Candidate
    "Candidate",
    # Views
    "ApplicantRef",
    "ApplicationDisplay",
    "CandidateUnavailable",
    "CourseStatistics",
    "MultiCourseCandidate",
    "SearchCriteria",
    "SelectionCount",
    "SelectionReport",
    "Statistics",
    "UnselectedCandidate",
]
