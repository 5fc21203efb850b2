"""
Candidate data models for TeachTeam.
"""

from pydantic import EmailStr, Field, field_validator

from teachteam.utils.constants import Availability

from .base import BaseDocument


class Candidate(BaseDocument):
    """A user who applies to tutor or assist in courses."""

    name: str
    email: EmailStr
    availability: Availability = Availability.PARTTIME
    skills: list[str] = Field(default_factory=list)
    is_blocked: bool = False  # set by administrators to revoke access

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        name = v.strip()
        if len(name) < 2:
            raise ValueError("Name must be at least 2 characters")
        return name

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    class Settings:
        """MongoDB collection settings."""

        name = "candidates"
        indexes = ["email", "is_blocked"]
