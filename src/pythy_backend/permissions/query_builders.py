from typing import Optional
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, Query

from pythy_backend.model.course import Assignment, AssignmentOffering, CourseEnrollment, CourseOffering
from pythy_backend.model.role import CourseCapability, CourseRole


class CoursePermissionQueryBuilder:
    """Utility class for building course-offering scoped permission queries"""

    @classmethod
    def user_offerings_subquery(cls, user_id: str, capability: Optional[CourseCapability] = None):
        """Select the ids of offerings where the user is enrolled, optionally with a capability"""
        statement = (
            select(CourseEnrollment.course_offering_id)
            .join(CourseRole, CourseRole.id == CourseEnrollment.course_role_id)
            .where(CourseEnrollment.user_id == user_id)
        )
        if capability:
            statement = statement.where(CourseRole.capability_filter(capability))
        return statement

    @classmethod
    def offerings_for_user(cls, user_id: str, capability: Optional[CourseCapability], db: Session) -> Query:
        """Offerings reachable through the user's enrollments (enrollment -> role -> offering)"""
        query = (
            db.query(CourseOffering)
            .join(CourseEnrollment, CourseEnrollment.course_offering_id == CourseOffering.id)
            .join(CourseRole, CourseRole.id == CourseEnrollment.course_role_id)
            .filter(CourseEnrollment.user_id == user_id)
        )
        if capability:
            query = query.filter(CourseRole.capability_filter(capability))
        return query.distinct()

    @classmethod
    def assignments_for_user(cls, user_id: str, capability: Optional[CourseCapability], db: Session) -> Query:
        subquery = cls.user_offerings_subquery(user_id, capability)
        return db.query(Assignment).filter(Assignment.course_offering_id.in_(subquery))

    @classmethod
    def assignment_offerings_for_user(cls, user_id: str, capability: Optional[CourseCapability], db: Session) -> Query:
        subquery = cls.user_offerings_subquery(user_id, capability)
        return (
            db.query(AssignmentOffering)
            .join(Assignment, Assignment.id == AssignmentOffering.assignment_id)
            .filter(Assignment.course_offering_id.in_(subquery))
        )

    @classmethod
    def enrollments_for_user(cls, user_id: str, capability: Optional[CourseCapability], db: Session,
                             include_own: bool = False) -> Query:
        subquery = cls.user_offerings_subquery(user_id, capability)
        condition = CourseEnrollment.course_offering_id.in_(subquery)
        if include_own:
            condition = or_(condition, CourseEnrollment.user_id == user_id)
        return db.query(CourseEnrollment).filter(condition)
