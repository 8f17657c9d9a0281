from .base import Base, metadata
from .role import GlobalRole, CourseRole, GlobalCapability, CourseCapability
from .auth import User, BootstrapClaim
from .organization import Institution, Department
from .course import (
    Course,
    CourseOffering,
    Assignment,
    AssignmentOffering,
    CourseEnrollment
)

# Import all models to ensure relationships are properly set up
from . import role, auth, organization, course

__all__ = [
    'Base',
    'metadata',
    # Role models
    'GlobalRole',
    'CourseRole',
    'GlobalCapability',
    'CourseCapability',
    # Auth models
    'User',
    'BootstrapClaim',
    # Organization
    'Institution',
    'Department',
    # Course hierarchy
    'Course',
    'CourseOffering',
    'Assignment',
    'AssignmentOffering',
    'CourseEnrollment',
]
