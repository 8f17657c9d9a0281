"""
Request identity dependencies.

Authentication itself is done by the upstream identity provider, which
forwards the authenticated user id in the ``X-User-Id`` header.
"""

import logging
from typing import Annotated, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from pythy_backend.api.exceptions import ServiceUnavailableException, UnauthorizedException
from pythy_backend.database import get_db
from pythy_backend.model.auth import User
from pythy_backend.permissions.ability import Ability
from pythy_backend.permissions.bootstrap import BootstrapPolicy
from pythy_backend.permissions.core import compute_ability
from pythy_backend.permissions.impersonation import ImpersonationSession, impersonation_registry

logger = logging.getLogger(__name__)


def require_setup_complete(db: Session = Depends(get_db)) -> None:
    """Reject normal traffic until the first user exists"""
    if BootstrapPolicy(db).needs_initial_setup():
        raise ServiceUnavailableException(detail={"setup_required": True})


def get_authenticated_user(
    x_user_id: Annotated[Optional[str], Header()] = None,
    db: Session = Depends(get_db)
) -> User:
    if not x_user_id:
        raise UnauthorizedException("No authenticated user")

    user = db.get(User, x_user_id)
    if user is None:
        logger.warning(f"Unknown authenticated user id {x_user_id}")
        raise UnauthorizedException("Unknown user")
    return user


def get_impersonation_session(
    user: Annotated[User, Depends(get_authenticated_user)],
    db: Session = Depends(get_db)
) -> ImpersonationSession:
    return impersonation_registry.restore(user, db)


def get_current_ability(
    session: Annotated[ImpersonationSession, Depends(get_impersonation_session)],
    db: Session = Depends(get_db)
) -> Ability:
    """Ability of the identity in effect for this request"""
    return compute_ability(session, db)
