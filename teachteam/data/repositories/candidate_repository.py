"""
Candidate repository for TeachTeam.
"""

import re
from typing import Optional

from teachteam.data.models.candidate import Candidate
from teachteam.data.models.display import CandidateUnavailable
from teachteam.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class CandidateRepository(BaseRepository[Candidate]):
    """Repository for candidate document operations."""

    @property
    def collection_name(self) -> str:
        return "candidates"

    @property
    def model_class(self) -> type[Candidate]:
        return Candidate

    def get_user_data(self, email: str) -> Optional[Candidate]:
        """
        Get a candidate by email, or None when unknown.

        Matching ignores case: addresses written by other services are not
        guaranteed to be stored lowercased.
        """
        if not email or not email.strip():
            return None
        pattern = f"^{re.escape(email.strip())}$"
        return self.find_one({"email": {"$regex": pattern, "$options": "i"}})

    def set_blocked(
        self,
        email: str,
        blocked: bool,
        reason: Optional[str] = None,
    ) -> Optional[CandidateUnavailable]:
        """
        Block or unblock a candidate.

        Blocking returns the notification payload for lecturers; unblocking
        and unknown emails return None.
        """
        candidate = self.get_user_data(email)
        if candidate is None:
            return None
        self.update_fields(candidate.id, {"is_blocked": blocked})
        logger.info(f"Candidate {candidate.email} {'blocked' if blocked else 'unblocked'}")
        if not blocked:
            return None
        return CandidateUnavailable(
            candidate_id=candidate.id_str,
            candidate_email=str(candidate.email),
            candidate_name=candidate.name,
            reason=reason,
        )


# Singleton instance
_candidate_repository: Optional[CandidateRepository] = None


def get_candidate_repository() -> CandidateRepository:
    """Get the candidate repository singleton instance."""
    global _candidate_repository
    if _candidate_repository is None:
        _candidate_repository = CandidateRepository()
    return _candidate_repository
