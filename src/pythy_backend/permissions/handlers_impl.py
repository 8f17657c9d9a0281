from abc import abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING
from sqlalchemy.orm import Session, Query, object_session

from pythy_backend.model.auth import User
from pythy_backend.model.course import Assignment
from pythy_backend.model.role import CourseCapability, GlobalCapability
from pythy_backend.permissions.actions import Action
from pythy_backend.permissions.handlers import PermissionHandler
from pythy_backend.permissions.query_builders import CoursePermissionQueryBuilder

if TYPE_CHECKING:
    from pythy_backend.permissions.ability import Ability

# Marks an action that only needs an enrollment, whatever the role
ENROLLED = CourseCapability.NONE


class CourseScopedPermissionHandler(PermissionHandler):
    """Resources that live beneath a course offering and are gated by enrollment"""

    ACTION_CAPABILITY_MAP: Dict[Action, CourseCapability] = {}

    def course_offering_id(self, ability: "Ability", resource: Any) -> Optional[str]:
        return resource.course_offering_id

    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        if action not in self.ACTION_CAPABILITY_MAP:
            raise self.undefined(action)

        capabilities = ability.enrollment_capabilities(self.course_offering_id(ability, resource))
        if capabilities is None:
            return False

        required = self.ACTION_CAPABILITY_MAP[action]
        return required == ENROLLED or bool(capabilities & required)

    def build_query(self, ability: "Ability", action: Action, db: Session) -> Query:
        if action not in self.ACTION_CAPABILITY_MAP:
            raise self.forbidden(action)
        return self.scoped_query(ability.user_id, self.ACTION_CAPABILITY_MAP[action], db)

    @abstractmethod
    def scoped_query(self, user_id: str, capability: CourseCapability, db: Session) -> Query:
        """Rows of the entity in offerings where the user holds ``capability``"""
        pass


class CourseOfferingPermissionHandler(CourseScopedPermissionHandler):
    """Permission handler for CourseOffering entity"""

    ACTION_CAPABILITY_MAP = {
        Action.read: ENROLLED,
        Action.update: CourseCapability.MANAGE_COURSE,
        Action.delete: CourseCapability.MANAGE_COURSE,
        Action.manage_course: CourseCapability.MANAGE_COURSE,
        Action.manage_assignments: CourseCapability.MANAGE_ASSIGNMENTS,
        Action.grade_submissions: CourseCapability.GRADE_SUBMISSIONS,
        Action.view_other_submissions: CourseCapability.VIEW_OTHER_SUBMISSIONS,
    }

    def course_offering_id(self, ability: "Ability", resource: Any) -> Optional[str]:
        return resource.id

    def scoped_query(self, user_id: str, capability: CourseCapability, db: Session) -> Query:
        return CoursePermissionQueryBuilder.offerings_for_user(user_id, capability, db)


class AssignmentPermissionHandler(CourseScopedPermissionHandler):
    """Permission handler for Assignment entity"""

    ACTION_CAPABILITY_MAP = {
        Action.read: ENROLLED,
        Action.create: CourseCapability.MANAGE_ASSIGNMENTS,
        Action.update: CourseCapability.MANAGE_ASSIGNMENTS,
        Action.delete: CourseCapability.MANAGE_ASSIGNMENTS,
        Action.manage_assignments: CourseCapability.MANAGE_ASSIGNMENTS,
        Action.grade_submissions: CourseCapability.GRADE_SUBMISSIONS,
        Action.view_other_submissions: CourseCapability.VIEW_OTHER_SUBMISSIONS,
    }

    def scoped_query(self, user_id: str, capability: CourseCapability, db: Session) -> Query:
        return CoursePermissionQueryBuilder.assignments_for_user(user_id, capability, db)


class AssignmentOfferingPermissionHandler(CourseScopedPermissionHandler):
    """Permission handler for AssignmentOffering entity.

    Students only see an assignment offering once it has opened; anyone who
    manages assignments in the offering sees it at any time.
    """

    ACTION_CAPABILITY_MAP = AssignmentPermissionHandler.ACTION_CAPABILITY_MAP

    def course_offering_id(self, ability: "Ability", resource: Any) -> Optional[str]:
        db = ability.db or object_session(resource)
        if db is not None and resource.assignment_id is not None:
            return (
                db.query(Assignment.course_offering_id)
                .filter(Assignment.id == resource.assignment_id)
                .scalar()
            )
        assignment = resource.assignment
        return assignment.course_offering_id if assignment is not None else None

    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        if action != Action.read:
            return super().can_perform_action(ability, action, resource)

        capabilities = ability.enrollment_capabilities(self.course_offering_id(ability, resource))
        if capabilities is None:
            return False
        return resource.is_visible() or bool(capabilities & CourseCapability.MANAGE_ASSIGNMENTS)

    def scoped_query(self, user_id: str, capability: CourseCapability, db: Session) -> Query:
        return CoursePermissionQueryBuilder.assignment_offerings_for_user(user_id, capability, db)


class CourseEnrollmentPermissionHandler(CourseScopedPermissionHandler):
    """Permission handler for CourseEnrollment entity"""

    ACTION_CAPABILITY_MAP = {
        Action.read: CourseCapability.MANAGE_COURSE,
        Action.create: CourseCapability.MANAGE_COURSE,
        Action.update: CourseCapability.MANAGE_COURSE,
        Action.delete: CourseCapability.MANAGE_COURSE,
    }

    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        # Users can always see their own enrollment
        if action == Action.read and resource.user_id == ability.user_id:
            return True
        return super().can_perform_action(ability, action, resource)

    def build_query(self, ability: "Ability", action: Action, db: Session) -> Query:
        # Own enrollments are listed alongside the managed ones
        if action == Action.read:
            return CoursePermissionQueryBuilder.enrollments_for_user(
                ability.user_id, self.ACTION_CAPABILITY_MAP[action], db, include_own=True
            )
        return super().build_query(ability, action, db)

    def scoped_query(self, user_id: str, capability: CourseCapability, db: Session) -> Query:
        return CoursePermissionQueryBuilder.enrollments_for_user(user_id, capability, db)


class UserPermissionHandler(PermissionHandler):
    """Permission handler for User entity"""

    DENIED_ACTIONS = {Action.create, Action.delete, Action.impersonate}

    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        # Users can read and update their own profile
        if action in (Action.read, Action.update):
            return resource.id is not None and resource.id == ability.user_id

        if action in self.DENIED_ACTIONS:
            return False

        raise self.undefined(action)

    def build_query(self, ability: "Ability", action: Action, db: Session) -> Query:
        if action in (Action.read, Action.update):
            return db.query(User).filter(User.id == ability.user_id)
        raise self.forbidden(action)


class OrganizationPermissionHandler(PermissionHandler):
    """Permission handler for Institution and Department entities; readable by everyone"""

    DENIED_ACTIONS = {Action.create, Action.update, Action.delete}

    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        if action == Action.read:
            return True

        if action in self.DENIED_ACTIONS:
            return False

        raise self.undefined(action)

    def build_query(self, ability: "Ability", action: Action, db: Session) -> Query:
        if action == Action.read:
            return db.query(self.entity)
        raise self.forbidden(action)


class CoursePermissionHandler(OrganizationPermissionHandler):
    """Permission handler for Course entity; creation needs a global capability"""

    DENIED_ACTIONS = {Action.update, Action.delete}

    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        if action == Action.create:
            return ability.has_global_capability(GlobalCapability.CREATE_COURSES)
        return super().can_perform_action(ability, action, resource)
