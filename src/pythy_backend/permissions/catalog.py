"""
Role catalog: the fixed set of global roles and course roles.

Global roles decide system-wide privileges (only ``administrator`` bypasses
hierarchy-scoped checks). Course roles are reusable capability bundles that
are granted per course offering through a CourseEnrollment.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Set, Union

from sqlalchemy.orm import Session

from pythy_backend.model.role import CourseCapability, CourseRole, GlobalCapability, GlobalRole
from pythy_backend.permissions.errors import ConfigurationError

logger = logging.getLogger(__name__)

CATALOG_VERSION = 1


class GlobalRoleName(str, Enum):
    administrator = "administrator"
    instructor = "instructor"
    regular_user = "regular_user"


class CourseRoleName(str, Enum):
    instructor = "instructor"
    grader = "grader"
    student = "student"


@dataclass(frozen=True)
class RoleDefinition:
    id: str
    title: str
    capabilities: int


class RoleCatalog:
    """Read-only catalog of role definitions, shared across requests"""

    GLOBAL_ROLES: Dict[str, RoleDefinition] = {
        GlobalRoleName.administrator.value: RoleDefinition(
            "administrator", "Administrator",
            GlobalCapability.MANAGE_ALL_COURSES
            | GlobalCapability.EDIT_SYSTEM_CONFIGURATION
            | GlobalCapability.CREATE_COURSES
        ),
        GlobalRoleName.instructor.value: RoleDefinition(
            "instructor", "Instructor", GlobalCapability.CREATE_COURSES
        ),
        GlobalRoleName.regular_user.value: RoleDefinition(
            "regular_user", "Regular User", GlobalCapability.NONE
        ),
    }

    COURSE_ROLES: Dict[str, RoleDefinition] = {
        CourseRoleName.instructor.value: RoleDefinition(
            "instructor", "Instructor",
            CourseCapability.MANAGE_COURSE
            | CourseCapability.MANAGE_ASSIGNMENTS
            | CourseCapability.GRADE_SUBMISSIONS
            | CourseCapability.VIEW_OTHER_SUBMISSIONS
        ),
        CourseRoleName.grader.value: RoleDefinition(
            "grader", "Grader",
            CourseCapability.GRADE_SUBMISSIONS | CourseCapability.VIEW_OTHER_SUBMISSIONS
        ),
        CourseRoleName.student.value: RoleDefinition(
            "student", "Student", CourseCapability.NONE
        ),
    }

    version = CATALOG_VERSION

    def global_role(self, name: str) -> RoleDefinition:
        return self._lookup(self.GLOBAL_ROLES, name, "global role")

    def course_role(self, name: str) -> RoleDefinition:
        return self._lookup(self.COURSE_ROLES, name, "course role")

    def is_administrator(self, global_role: Union[GlobalRole, str, None]) -> bool:
        """True only for the administrator global role"""
        if global_role is None:
            return False
        name = global_role if isinstance(global_role, str) else global_role.id
        self.global_role(name)
        return name == GlobalRoleName.administrator.value

    def capabilities(self, course_role: Union[CourseRole, str]) -> Set[str]:
        """Names of the capabilities granted by a course role, e.g. {'can_manage_course'}"""
        if isinstance(course_role, str):
            flags = CourseCapability(self.course_role(course_role).capabilities)
        else:
            flags = CourseCapability(course_role.capabilities or 0)
        return capability_names(flags)

    def course_capability(self, name: str) -> CourseCapability:
        """Resolve 'can_manage_course' or 'manage_course' to its flag"""
        key = name[4:] if name.startswith("can_") else name
        try:
            return CourseCapability[key.upper()]
        except KeyError:
            logger.error(f"Unknown course capability '{name}'")
            raise ConfigurationError(f"Unknown course capability '{name}'")

    def seed(self, db: Session) -> None:
        """Persist the catalog rows; existing rows get their capabilities refreshed"""
        for model, definitions in ((GlobalRole, self.GLOBAL_ROLES), (CourseRole, self.COURSE_ROLES)):
            for definition in definitions.values():
                row = db.get(model, definition.id)
                if row is None:
                    db.add(model(
                        id=definition.id,
                        title=definition.title,
                        builtin=True,
                        capabilities=int(definition.capabilities)
                    ))
                else:
                    row.capabilities = int(definition.capabilities)
        db.commit()
        logger.info(f"Role catalog v{self.version} seeded")

    def _lookup(self, definitions: Dict[str, RoleDefinition], name: str, kind: str) -> RoleDefinition:
        definition = definitions.get(name)
        if definition is None:
            logger.error(f"Unknown {kind} '{name}'")
            raise ConfigurationError(f"Unknown {kind} '{name}'")
        return definition


def capability_names(flags: CourseCapability) -> Set[str]:
    return {
        f"can_{member.name.lower()}"
        for member in CourseCapability
        if member.value and flags & member
    }


role_catalog = RoleCatalog()
