"""
Permission system entry points: handler registration and ability computation.
"""

from typing import Union
from sqlalchemy.orm import Session

from pythy_backend.model.auth import User
from pythy_backend.model.course import Assignment, AssignmentOffering, Course, CourseEnrollment, CourseOffering
from pythy_backend.model.organization import Department, Institution
from pythy_backend.permissions.ability import Ability, AbilityBuilder
from pythy_backend.permissions.handlers import permission_registry
from pythy_backend.permissions.handlers_impl import (
    AssignmentOfferingPermissionHandler,
    AssignmentPermissionHandler,
    CourseEnrollmentPermissionHandler,
    CourseOfferingPermissionHandler,
    CoursePermissionHandler,
    OrganizationPermissionHandler,
    UserPermissionHandler,
)
from pythy_backend.permissions.impersonation import ImpersonationSession


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""

    # Identity
    permission_registry.register(User, UserPermissionHandler(User))

    # Organization hierarchy above the offerings
    permission_registry.register(Institution, OrganizationPermissionHandler(Institution))
    permission_registry.register(Department, OrganizationPermissionHandler(Department))
    permission_registry.register(Course, CoursePermissionHandler(Course))

    # Offering-scoped entities
    permission_registry.register(CourseOffering, CourseOfferingPermissionHandler(CourseOffering))
    permission_registry.register(Assignment, AssignmentPermissionHandler(Assignment))
    permission_registry.register(AssignmentOffering, AssignmentOfferingPermissionHandler(AssignmentOffering))
    permission_registry.register(CourseEnrollment, CourseEnrollmentPermissionHandler(CourseEnrollment))


def compute_ability(actor: Union[User, ImpersonationSession], db: Session) -> Ability:
    """Ability of an authenticated user, or of the effective actor of an impersonation session"""
    if isinstance(actor, ImpersonationSession):
        return actor.ability
    return AbilityBuilder.build(actor, db)


def check_admin(ability: Ability) -> bool:
    """Check if the ability belongs to an administrator"""
    return ability.is_admin


# Initialize handlers on module import
initialize_permission_handlers()
