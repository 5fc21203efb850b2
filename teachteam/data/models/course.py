"""
Course data models for TeachTeam.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from teachteam.utils.constants import (
    CATALOG_CODE_PATTERN,
    COURSE_CODE_PATTERN,
    COURSE_NAME_MIN_LENGTH,
    COURSE_NOT_IN_CATALOG,
    UNKNOWN_COURSE_CODE,
)

from .base import BaseDocument, EmbeddedModel


class Course(BaseDocument):
    """A course offering in the catalog."""

    code: str  # e.g. "COSC2758"
    name: str  # e.g. "Full Stack Development"
    semester: str = "Semester 1"
    year: int = 2025
    lecturer_emails: list[str] = Field(default_factory=list)

    class Settings:
        """MongoDB collection settings."""

        name = "courses"
        indexes = ["code", "lecturer_emails"]


class CourseCreate(BaseModel):
    """Schema for an administrator adding a course to the catalog."""

    code: str
    name: str
    semester: str = "Semester 1"
    year: int = 2025

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not CATALOG_CODE_PATTERN.match(code):
            raise ValueError("Course code must be in format COSCxxxx")
        return code

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        name = v.strip()
        if len(name) < COURSE_NAME_MIN_LENGTH:
            raise ValueError(f"Course name must be at least {COURSE_NAME_MIN_LENGTH} characters")
        return name

    def to_document(self) -> Course:
        return Course(code=self.code, name=self.name, semester=self.semester, year=self.year)


class CourseDetails(EmbeddedModel):
    """Code and name pair shown next to an application."""

    code: str
    name: str
    found: bool = True

    @classmethod
    def from_course(cls, course: Optional[Course]) -> Optional["CourseDetails"]:
        if course is None:
            return None
        return cls(code=course.code, name=course.name)

    @classmethod
    def placeholder(cls, course_id: Optional[str]) -> "CourseDetails":
        """
        Details for a course id missing from the catalog.

        Ids that look like a course code (e.g. COSC2758) are shown as that
        code; anything else is shown as the raw id.
        """
        raw = course_id or ""
        if COURSE_CODE_PATTERN.match(raw):
            return cls(code=raw, name=f"{raw} Course", found=False)
        return cls(code=raw or UNKNOWN_COURSE_CODE, name=COURSE_NOT_IN_CATALOG, found=False)
