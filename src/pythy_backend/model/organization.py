from sqlalchemy import Column, DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import relationship

from .base import Base, generate_id


class Institution(Base):
    __tablename__ = 'institution'

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    name = Column(String(255), nullable=False)
    display_name = Column(String(255))
    domain = Column(String(255), index=True)
    url = Column(String(2048))

    # Relationships
    departments = relationship('Department', back_populates='institution', cascade='all, delete-orphan')
    users = relationship('User', back_populates='institution')


class Department(Base):
    __tablename__ = 'department'
    __table_args__ = (
        Index('department_abbreviation_key', 'institution_id', 'abbreviation', unique=True),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    name = Column(String(255), nullable=False)
    abbreviation = Column(String(63))
    institution_id = Column(ForeignKey('institution.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False, index=True)

    # Relationships
    institution = relationship('Institution', back_populates='departments')
    courses = relationship('Course', back_populates='department', cascade='all, delete-orphan')
