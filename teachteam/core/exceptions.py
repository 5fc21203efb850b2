"""
Error taxonomy for the selection core.
"""

from typing import Optional


class SelectionError(Exception):
    """Base class for applicant selection errors."""

    pass


class InvalidRank(SelectionError):
    """
    Raised when a ranking request cannot be applied.

    The requested rank is outside 1..n for the course group, or the target
    application is not Selected.
    """

    def __init__(self, message: str, application_id: Optional[str] = None, rank: Optional[int] = None):
        super().__init__(message)
        self.application_id = application_id
        self.rank = rank


class NotFound(SelectionError):
    """Raised when a referenced application, course or candidate is missing."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} not found: {resource_id}")
        self.resource_type = resource_type
        self.resource_id = resource_id


class PersistenceFailure(SelectionError):
    """
    Raised when the application store fails to read or write.

    Never retried by the core; callers report it and let the user retry.
    """

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class DuplicateApplication(SelectionError):
    """Raised when a candidate applies twice for the same course and role."""

    pass
