"""
Shared test fixtures for the TeachTeam test suite.

Sets environment variables before any teachteam imports so settings load in
testing mode, then provides factory fixtures for applications and display
records and an in-memory application store.
"""

import os

# === Set environment BEFORE any teachteam imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "teachteam_test")

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Optional

import pytest
from bson import ObjectId

from teachteam.data.models import (
    Application,
    ApplicationDisplay,
    Candidate,
    Course,
    CourseDetails,
)
from teachteam.utils.constants import ApplicationStatus, Availability, SessionType

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_display():
    """Factory that returns a callable to build ApplicationDisplay records."""
    sequence = count()

    def _factory(
        candidate_name: str = "Alice Nguyen",
        course_code: str = "COSC2758",
        course_name: str = "Full Stack Development",
        course_id: Optional[str] = None,
        session_type: SessionType = SessionType.TUTOR,
        skills: Optional[list[str]] = None,
        availability: Availability = Availability.PARTTIME,
        status: ApplicationStatus = ApplicationStatus.PENDING,
        ranking: Optional[int] = None,
        **overrides: Any,
    ) -> ApplicationDisplay:
        n = next(sequence)
        data = dict(
            id=str(ObjectId()),
            candidate_name=candidate_name,
            candidate_email=f"{candidate_name.split()[0].lower()}{n}@student.rmit.edu.au",
            course_id=course_id or course_code,
            course_code=course_code,
            course_name=course_name,
            session_type=session_type,
            skills=skills if skills is not None else ["Python"],
            availability=availability,
            status=status,
            ranking=ranking,
            created_at=BASE_TIME + timedelta(minutes=n),
        )
        data.update(overrides)
        return ApplicationDisplay(**data)

    return _factory


@pytest.fixture
def make_application():
    """Factory that returns a callable to build stored Application documents."""
    sequence = count()

    def _factory(
        candidate_email: str = "alice@student.rmit.edu.au",
        course_id: str = "COSC2758",
        session_type: SessionType = SessionType.TUTOR,
        skills: Optional[list[str]] = None,
        availability: Availability = Availability.PARTTIME,
        status: ApplicationStatus = ApplicationStatus.PENDING,
        ranking: Optional[int] = None,
        **overrides: Any,
    ) -> Application:
        n = next(sequence)
        data = dict(
            id=ObjectId(),
            candidate_email=candidate_email,
            course_id=course_id,
            session_type=session_type,
            skills=skills if skills is not None else ["Python"],
            availability=availability,
            status=status,
            ranking=ranking,
            created_at=BASE_TIME + timedelta(minutes=n),
        )
        data.update(overrides)
        return Application(**data)

    return _factory


@pytest.fixture
def make_selected_group(make_application):
    """Factory for a course group of Selected applications ranked 1..n."""

    def _factory(size: int, course_id: str = "COSC2758", **overrides: Any) -> list[Application]:
        return [
            make_application(
                candidate_email=f"tutor{i}@student.rmit.edu.au",
                course_id=course_id,
                status=ApplicationStatus.SELECTED,
                ranking=i,
                **overrides,
            )
            for i in range(1, size + 1)
        ]

    return _factory


# ---------------------------------------------------------------------------
# Sample catalog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_course():
    return Course(id=ObjectId(), code="COSC2758", name="Full Stack Development")


@pytest.fixture
def sample_candidate():
    return Candidate(
        id=ObjectId(),
        name="Alice Nguyen",
        email="alice@student.rmit.edu.au",
        availability=Availability.FULLTIME,
        skills=["Python", "React"],
    )


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class FakeApplicationStore:
    """Dictionary-backed stand-in for ApplicationRepository."""

    def __init__(self, applications: Optional[list[Application]] = None):
        self.items: dict[str, Application] = {}
        self.writes: list[list[Application]] = []
        for application in applications or []:
            self.items[str(application.id)] = application

    def get_by_id(self, id_value: Any) -> Optional[Application]:
        return self.items.get(str(id_value))

    def get_applications_for_course(
        self, course_id: str, session_type: Optional[SessionType] = None
    ) -> list[Application]:
        return [
            a for a in self.items.values()
            if a.course_id == course_id
            and (session_type is None or a.session_type == SessionType(session_type).value)
        ]

    async def get_applications_for_course_async(
        self, course_id: str, session_type: Optional[SessionType] = None
    ) -> list[Application]:
        return self.get_applications_for_course(course_id, session_type)

    def get_applications_for_courses(self, course_ids: list[str]) -> list[Application]:
        return [a for a in self.items.values() if a.course_id in course_ids]

    def get_all_applications(self, limit: int = 0) -> list[Application]:
        applications = list(self.items.values())
        return applications[:limit] if limit else applications

    def apply_rankings(self, applications: list[Application]) -> int:
        self.writes.append(list(applications))
        matched = 0
        for application in applications:
            key = str(application.id)
            if key in self.items:
                self.items[key] = application
                matched += 1
        return matched

    def add_comment(self, id_value: Any, text: str) -> Optional[list[str]]:
        application = self.items.get(str(id_value))
        if application is None:
            return None
        updated = application.model_copy(update={"comments": [*application.comments, text]})
        self.items[str(id_value)] = updated
        return updated.comments


@pytest.fixture
def fake_store():
    return FakeApplicationStore()


@pytest.fixture
def course_lookup():
    """Course lookup that knows only COSC2758."""

    def _lookup(course_id: str) -> CourseDetails:
        if course_id == "COSC2758":
            return CourseDetails(code="COSC2758", name="Full Stack Development")
        return CourseDetails.placeholder(course_id)

    return _lookup


@pytest.fixture
def user_lookup():
    """Candidate lookup that derives a name from the email local part."""

    def _lookup(email: str) -> Optional[Candidate]:
        if email.startswith("ghost"):
            return None
        local = email.split("@")[0]
        return Candidate(name=local.capitalize(), email=email)

    return _lookup


@pytest.fixture
def make_store():
    """Factory for a FakeApplicationStore seeded with applications."""
    return FakeApplicationStore
