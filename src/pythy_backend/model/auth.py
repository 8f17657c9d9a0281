import re
from typing import Optional
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from .base import Base, generate_id


class User(Base):
    __tablename__ = 'user'

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())
    email = Column(String(320), unique=True, nullable=False)
    first_name = Column(String(255))
    last_name = Column(String(255))
    global_role_id = Column(ForeignKey('global_role.id', ondelete='RESTRICT', onupdate='CASCADE'), index=True)
    institution_id = Column(ForeignKey('institution.id', ondelete='SET NULL'), index=True)

    global_role = relationship('GlobalRole', back_populates='users')
    institution = relationship('Institution', back_populates='users')
    course_enrollments = relationship('CourseEnrollment', back_populates='user', uselist=True, lazy='select', cascade='all, delete-orphan')

    @property
    def full_name(self) -> Optional[str]:
        if self.last_name and self.first_name:
            return f"{self.last_name}, {self.first_name}"
        return self.last_name or self.first_name or None

    @property
    def display_name(self) -> str:
        """Full name when known, otherwise the e-mail address"""
        return self.full_name or self.email

    @property
    def email_without_domain(self) -> str:
        match = re.match(r'^([^@]+)@', self.email or '')
        return match.group(1) if match else self.email

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class BootstrapClaim(Base):
    """Single-row marker written by the first administrator when bootstrap is serialized"""
    __tablename__ = 'bootstrap_claim'

    id = Column(Integer, primary_key=True)
    # Not a foreign key: the claim is written before the user row is flushed
    user_id = Column(String(36), nullable=False)
    email = Column(String(320), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
