from enum import IntFlag
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from .base import Base


class GlobalCapability(IntFlag):
    NONE = 0
    MANAGE_ALL_COURSES = 1
    EDIT_SYSTEM_CONFIGURATION = 2
    CREATE_COURSES = 4


class CourseCapability(IntFlag):
    NONE = 0
    MANAGE_COURSE = 1
    MANAGE_ASSIGNMENTS = 2
    GRADE_SUBMISSIONS = 4
    VIEW_OTHER_SUBMISSIONS = 8


class GlobalRole(Base):
    __tablename__ = 'global_role'

    id = Column(String(255), primary_key=True)
    title = Column(String(255))
    description = Column(String(4096))
    builtin = Column(Boolean, nullable=False, default=False)
    capabilities = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    # Relationships
    users = relationship('User', back_populates='global_role')

    def has_capability(self, capability: GlobalCapability) -> bool:
        return bool(GlobalCapability(self.capabilities or 0) & capability)

    @property
    def can_manage_all_courses(self) -> bool:
        return self.has_capability(GlobalCapability.MANAGE_ALL_COURSES)

    @property
    def can_edit_system_configuration(self) -> bool:
        return self.has_capability(GlobalCapability.EDIT_SYSTEM_CONFIGURATION)

    @property
    def can_create_courses(self) -> bool:
        return self.has_capability(GlobalCapability.CREATE_COURSES)


class CourseRole(Base):
    __tablename__ = 'course_role'

    id = Column(String(255), primary_key=True)
    title = Column(String(255))
    description = Column(String(4096))
    builtin = Column(Boolean, nullable=False, default=False)
    capabilities = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    # Relationships
    course_enrollments = relationship('CourseEnrollment', back_populates='course_role')

    def has_capability(self, capability: CourseCapability) -> bool:
        return bool(CourseCapability(self.capabilities or 0) & capability)

    @property
    def can_manage_course(self) -> bool:
        return self.has_capability(CourseCapability.MANAGE_COURSE)

    @property
    def can_manage_assignments(self) -> bool:
        return self.has_capability(CourseCapability.MANAGE_ASSIGNMENTS)

    @property
    def can_grade_submissions(self) -> bool:
        return self.has_capability(CourseCapability.GRADE_SUBMISSIONS)

    @property
    def can_view_other_submissions(self) -> bool:
        return self.has_capability(CourseCapability.VIEW_OTHER_SUBMISSIONS)

    @classmethod
    def capability_filter(cls, capability: CourseCapability):
        """SQL expression matching roles that carry ``capability``"""
        return cls.capabilities.op('&')(int(capability)) != 0
