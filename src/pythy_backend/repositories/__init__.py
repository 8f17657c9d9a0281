"""
Repository pattern implementation for direct database access.
"""

from .base import (
    BaseRepository,
    RepositoryError,
    NotFoundError,
    DuplicateError
)
from .user import UserRepository
from .course_enrollment import CourseEnrollmentRepository
from .assignment_offering import AssignmentOfferingRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "UserRepository",
    "CourseEnrollmentRepository",
    "AssignmentOfferingRepository",
]
