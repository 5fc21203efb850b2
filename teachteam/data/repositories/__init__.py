"""
Database repositories for TeachTeam data access.

This module provides repository classes for all database collections,
implementing the repository pattern for clean data access.
"""

# Base repository
from .base import BaseRepository

# Entity repositories
from .application_repository import ApplicationRepository, get_application_repository
from .candidate_repository import CandidateRepository, get_candidate_repository
from .course_repository import CourseRepository, get_course_repository

__all__ = [
    # Base
    "BaseRepository",
    # Application
    "ApplicationRepository",
    "get_application_repository",
    # Candidate
    "CandidateRepository",
    "get_candidate_repository",
    # Course
    "CourseRepository",
    "get_course_repository",
]
