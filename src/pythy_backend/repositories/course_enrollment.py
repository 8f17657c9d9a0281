from typing import Optional
from sqlalchemy.orm import Session

from .base import BaseRepository, DuplicateError
from ..model.course import CourseEnrollment


class CourseEnrollmentRepository(BaseRepository[CourseEnrollment]):
    """Repository for CourseEnrollment entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, CourseEnrollment)

    def find_for(self, user_id: str, course_offering_id: str) -> Optional[CourseEnrollment]:
        return self.find_one_by(user_id=user_id, course_offering_id=course_offering_id)

    def enroll(self, user_id: str, course_offering_id: str, course_role_id: str) -> CourseEnrollment:
        """
        Enroll a user in a course offering.

        Raises:
            DuplicateError: If the user already has an enrollment in the offering
        """
        criteria = {"user_id": user_id, "course_offering_id": course_offering_id}
        if self.find_for(user_id, course_offering_id) is not None:
            raise DuplicateError(CourseEnrollment.__name__, criteria)

        # The unique constraint still guards concurrent enrollments
        return self.create(CourseEnrollment(course_role_id=course_role_id, **criteria))
