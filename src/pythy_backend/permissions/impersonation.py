"""
Administrator impersonation.

An ImpersonationSession wraps the authenticated (true) actor and the
identity currently in effect. While impersonating, abilities are computed for
the target only, so an administrator gets exactly the target's restricted
capabilities. The true actor stays available for audit logging throughout.
"""

import logging
from enum import Enum
from typing import Optional
from sqlalchemy.orm import Session

from pythy_backend.model.auth import User
from pythy_backend.permissions.ability import Ability, AbilityBuilder
from pythy_backend.permissions.catalog import role_catalog
from pythy_backend.permissions.errors import Forbidden, InvalidState

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    direct = "direct"
    impersonating = "impersonating"


class ImpersonationSession:

    def __init__(self, true_actor: User, db: Session):
        self.true_actor = true_actor
        self.db = db
        self._target: Optional[User] = None
        self._ability: Optional[Ability] = None

    @property
    def state(self) -> SessionState:
        return SessionState.impersonating if self._target is not None else SessionState.direct

    @property
    def is_impersonating(self) -> bool:
        return self.state == SessionState.impersonating

    @property
    def effective_actor(self) -> User:
        return self._target if self._target is not None else self.true_actor

    @property
    def ability(self) -> Ability:
        """Ability of the effective actor, built once per state"""
        if self._ability is None:
            if self.is_impersonating:
                self._ability = AbilityBuilder.build(self._target, self.db, true_actor=self.true_actor)
            else:
                self._ability = AbilityBuilder.build(self.true_actor, self.db)
        return self._ability

    def start(self, target: Optional[User]) -> "ImpersonationSession":
        if self.is_impersonating:
            raise InvalidState("Already impersonating another user")

        if not role_catalog.is_administrator(self.true_actor.global_role_id):
            logger.warning(f"User {self.true_actor.id} tried to impersonate without administrator role")
            raise Forbidden("Only administrators can impersonate other users")

        if target is None:
            raise Forbidden("Impersonation target does not exist")

        self._target = target
        self._ability = None
        logger.info(f"Impersonation started: {self.true_actor.email} ({self.true_actor.id}) acting as {target.email} ({target.id})")
        return self

    def stop(self) -> "ImpersonationSession":
        if self._target is not None:
            logger.info(f"Impersonation stopped: {self.true_actor.email} ({self.true_actor.id}) no longer acting as {self._target.email} ({self._target.id})")
        self._target = None
        self._ability = None
        return self

    def audit_context(self) -> dict:
        """Identities to attach to audit records"""
        return {
            "true_actor_id": self.true_actor.id,
            "effective_actor_id": self.effective_actor.id,
            "impersonating": self.is_impersonating,
        }


class ImpersonationRegistry:
    """In-process record of who is impersonating whom, keyed by true actor id"""

    def __init__(self):
        self._targets: dict = {}

    def get(self, true_actor_id: str) -> Optional[str]:
        return self._targets.get(true_actor_id)

    def set(self, true_actor_id: str, target_id: str) -> None:
        self._targets[true_actor_id] = target_id

    def clear(self, true_actor_id: str) -> None:
        self._targets.pop(true_actor_id, None)

    def restore(self, true_actor: User, db: Session) -> ImpersonationSession:
        """Rebuild the session for a request from the recorded target"""
        session = ImpersonationSession(true_actor, db)
        target_id = self.get(true_actor.id)
        if target_id is None:
            return session

        try:
            session.start(db.get(User, target_id))
        except (Forbidden, InvalidState):
            # Target vanished or actor lost administrator role since start
            logger.info(f"Dropping stale impersonation of {target_id} by {true_actor.id}")
            self.clear(true_actor.id)
            return ImpersonationSession(true_actor, db)
        return session


impersonation_registry = ImpersonationRegistry()
