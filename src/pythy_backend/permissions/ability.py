"""
Ability: the capability snapshot of one acting identity for one request.

An Ability is built once from a single read of the actor's global role and
course enrollments and never changes afterwards. It is request scoped: it is
not cached across requests or shared between actors.
"""

import logging
from typing import Any, Dict, Optional, Type, Union
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from sqlalchemy import false
from sqlalchemy.orm import Session, Query

from pythy_backend.model.auth import User
from pythy_backend.model.course import CourseEnrollment, CourseOffering
from pythy_backend.model.role import CourseCapability, CourseRole, GlobalCapability, GlobalRole
from pythy_backend.permissions.actions import Action, parse_action
from pythy_backend.permissions.catalog import role_catalog
from pythy_backend.permissions.errors import PolicyNotDefined
from pythy_backend.permissions.handlers import permission_registry
from pythy_backend.permissions.query_builders import CoursePermissionQueryBuilder

logger = logging.getLogger(__name__)


class Ability(BaseModel):
    """Immutable permission snapshot of an acting identity"""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    global_role_id: Optional[str] = None
    is_admin: bool = False
    global_capabilities: int = 0
    # course_offering_id -> CourseCapability bits of the enrolled role
    enrollments: Dict[str, int] = Field(default_factory=dict)
    # Set when the snapshot belongs to an impersonated identity
    true_actor_id: Optional[str] = None

    _db: Optional[Session] = PrivateAttr(default=None)

    def bind(self, db: Optional[Session]) -> "Ability":
        self._db = db
        return self

    @property
    def db(self) -> Optional[Session]:
        return self._db

    @property
    def is_impersonated(self) -> bool:
        return self.true_actor_id is not None

    def has_global_capability(self, capability: GlobalCapability) -> bool:
        if self.is_admin:
            return True
        return bool(GlobalCapability(self.global_capabilities) & capability)

    def enrollment_capabilities(self, course_offering_id: Optional[str]) -> Optional[CourseCapability]:
        """Capabilities granted in an offering, None when not enrolled"""
        if course_offering_id is None or course_offering_id not in self.enrollments:
            return None
        return CourseCapability(self.enrollments[course_offering_id])

    def can(self, action: Union[Action, str], resource: Any) -> bool:
        """
        Decide whether this identity may perform ``action`` on ``resource``.

        Never raises for catalog actions; any lookup miss or missing policy
        is a deny. Unknown action names raise ConfigurationError.
        """
        action = parse_action(action)

        if self.is_admin:
            return True

        handler = permission_registry.get_handler(type(resource))
        try:
            if handler is None:
                raise PolicyNotDefined(action.value, type(resource).__name__)
            allowed = handler.can_perform_action(self, action, resource)
        except PolicyNotDefined as e:
            logger.warning(f"Policy not defined, denying user {self.user_id}: {e}")
            return False

        if not allowed:
            logger.debug(f"Denied '{action.value}' on {handler.resource_name} for user {self.user_id}")
        return allowed

    def cannot(self, action: Union[Action, str], resource: Any) -> bool:
        return not self.can(action, resource)

    def managing_course_offerings(self) -> Query:
        """Course offerings this identity manages, as a lazy query"""
        db = self._require_db()
        if self.is_admin:
            return db.query(CourseOffering)
        return CoursePermissionQueryBuilder.offerings_for_user(
            self.user_id, CourseCapability.MANAGE_COURSE, db
        )

    def accessible_course_offerings(self) -> Query:
        """Course offerings this identity is enrolled in with any role"""
        db = self._require_db()
        if self.is_admin:
            return db.query(CourseOffering)
        return CoursePermissionQueryBuilder.offerings_for_user(self.user_id, None, db)

    def permitted_query(self, action: Union[Action, str], entity: Type[Any]) -> Query:
        """Rows of ``entity`` the identity may perform ``action`` on"""
        action = parse_action(action)
        db = self._require_db()

        if self.is_admin:
            return db.query(entity)

        handler = permission_registry.get_handler(entity)
        if handler is None:
            logger.warning(f"Policy not defined for '{action.value}' on {entity.__name__}")
            return db.query(entity).filter(false())
        return handler.build_query(self, action, db)

    def _require_db(self) -> Session:
        if self._db is None:
            raise RuntimeError("Ability is not bound to a database session")
        return self._db


class AbilityBuilder:
    """Builds Ability snapshots from the database"""

    @staticmethod
    def build(user: User, db: Session, true_actor: Optional[User] = None) -> Ability:
        global_role: Optional[GlobalRole] = None
        if user.global_role_id is not None:
            global_role = db.get(GlobalRole, user.global_role_id)

        # One joined read so the enrollment and its role capabilities agree
        rows = (
            db.query(CourseEnrollment.course_offering_id, CourseRole.capabilities)
            .join(CourseRole, CourseRole.id == CourseEnrollment.course_role_id)
            .filter(CourseEnrollment.user_id == user.id)
            .all()
        )

        ability = Ability(
            user_id=user.id,
            global_role_id=user.global_role_id,
            is_admin=role_catalog.is_administrator(user.global_role_id),
            global_capabilities=(global_role.capabilities or 0) if global_role is not None else 0,
            enrollments={offering_id: capabilities or 0 for offering_id, capabilities in rows},
            true_actor_id=true_actor.id if true_actor is not None else None,
        )
        return ability.bind(db)

    @staticmethod
    def anonymous(db: Optional[Session] = None) -> Ability:
        return Ability().bind(db)
