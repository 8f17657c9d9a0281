from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from .base import Base, generate_id


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Course(Base):
    __tablename__ = 'course'

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    name = Column(String(255), nullable=False)
    number = Column(String(63))
    department_id = Column(ForeignKey('department.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)

    # Relationships
    department = relationship('Department', back_populates='courses')
    course_offerings = relationship('CourseOffering', back_populates='course', cascade='all, delete-orphan')


class CourseOffering(Base):
    __tablename__ = 'course_offering'

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    term = Column(String(63))
    label = Column(String(255))
    url = Column(String(2048))
    course_id = Column(ForeignKey('course.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)

    # Relationships
    course = relationship('Course', back_populates='course_offerings')
    assignments = relationship('Assignment', back_populates='course_offering', cascade='all, delete-orphan')
    course_enrollments = relationship('CourseEnrollment', back_populates='course_offering', cascade='all, delete-orphan')


class Assignment(Base):
    __tablename__ = 'assignment'

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    name = Column(String(255), nullable=False)
    summary = Column(String(4096))
    course_offering_id = Column(ForeignKey('course_offering.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)

    # Relationships
    course_offering = relationship('CourseOffering', back_populates='assignments')
    assignment_offerings = relationship('AssignmentOffering', back_populates='assignment', cascade='all, delete-orphan')


class AssignmentOffering(Base):
    """
    Scheduled window of an assignment.

    due_at and closes_at are both optional:
    - neither set: students may work indefinitely
    - only one set: work stops at (due_at or closes_at)
    - both set: work stops at closes_at, work after due_at may be penalized
    """
    __tablename__ = 'assignment_offering'

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    opens_at = Column(DateTime(True))
    due_at = Column(DateTime(True))
    closes_at = Column(DateTime(True))
    assignment_id = Column(ForeignKey('assignment.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)

    # Relationships
    assignment = relationship('Assignment', back_populates='assignment_offerings')

    @property
    def effectively_due_at(self) -> Optional[datetime]:
        return _as_utc(self.due_at or self.closes_at)

    def is_visible(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        opens_at = _as_utc(self.opens_at)
        return opens_at is not None and now >= opens_at

    def is_past_due(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        due = self.effectively_due_at
        return due is not None and due < now

    def is_closed(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        if self.closes_at is not None:
            return _as_utc(self.closes_at) < now
        if self.due_at is not None:
            return _as_utc(self.due_at) < now
        return False


class CourseEnrollment(Base):
    __tablename__ = 'course_enrollment'
    __table_args__ = (
        UniqueConstraint('user_id', 'course_offering_id', name='course_enrollment_user_offering_key'),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)
    course_offering_id = Column(ForeignKey('course_offering.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)
    course_role_id = Column(ForeignKey('course_role.id', ondelete='RESTRICT', onupdate='CASCADE'), nullable=False)

    # Relationships
    user = relationship('User', back_populates='course_enrollments')
    course_offering = relationship('CourseOffering', back_populates='course_enrollments')
    course_role = relationship('CourseRole', back_populates='course_enrollments')
