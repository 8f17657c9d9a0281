"""
First-user bootstrap.

The very first account created becomes the administrator; every later account
is a regular user. The check counts existing users before the new row is
flushed, so two creations running concurrently against an empty table can
both become administrator. That window is accepted by default since setup is
done once by a single operator. Setting SERIALIZE_BOOTSTRAP closes it with a
single-row ``bootstrap_claim`` marker: only one transaction can insert it and
the loser is demoted to a regular user. A claim outlives its user only when
the user table is emptied; such a claim is discarded by the next first user.
"""

import logging
from typing import Optional
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pythy_backend.model.auth import BootstrapClaim, User
from pythy_backend.model.base import generate_id
from pythy_backend.model.role import GlobalRole
from pythy_backend.permissions.catalog import GlobalRoleName, role_catalog
from pythy_backend.permissions.errors import ConfigurationError
from pythy_backend.settings import settings

logger = logging.getLogger(__name__)

BOOTSTRAP_CLAIM_ID = 1


class BootstrapPolicy:

    def __init__(self, db: Session, serialize: Optional[bool] = None):
        self.db = db
        self.serialize = settings.SERIALIZE_BOOTSTRAP if serialize is None else serialize

    def user_count(self) -> int:
        return self.db.query(User).count()

    def needs_initial_setup(self) -> bool:
        """True while no user exists; routing sends all traffic to the setup flow"""
        return self.user_count() == 0

    def assign_initial_role(self, new_user: User) -> GlobalRole:
        """Pick and set the global role of a user that has not been flushed yet"""
        with self.db.no_autoflush:
            is_first = self.user_count() == 0

        role = self._global_role(GlobalRoleName.administrator if is_first else GlobalRoleName.regular_user)

        if is_first and self.serialize and not self._claim_bootstrap(new_user):
            logger.warning(f"Bootstrap already claimed, {new_user.email} becomes a regular user")
            role = self._global_role(GlobalRoleName.regular_user)

        new_user.global_role = role
        if is_first and role.id == GlobalRoleName.administrator.value:
            logger.info(f"Bootstrapping {new_user.email} as administrator")
        return role

    def _claim_bootstrap(self, new_user: User) -> bool:
        if new_user.id is None:
            new_user.id = generate_id()
        try:
            with self.db.begin_nested():
                # A claim whose user is gone is left over from an emptied user table
                owner_exists = select(User.id).where(User.id == BootstrapClaim.user_id).exists()
                self.db.execute(
                    delete(BootstrapClaim).where(~owner_exists),
                    execution_options={"synchronize_session": "fetch"}
                )
                self.db.add(BootstrapClaim(id=BOOTSTRAP_CLAIM_ID, user_id=new_user.id, email=new_user.email))
            return True
        except IntegrityError:
            return False

    def _global_role(self, name: GlobalRoleName) -> GlobalRole:
        role_catalog.global_role(name.value)
        role = self.db.get(GlobalRole, name.value)
        if role is None:
            logger.error(f"Global role '{name.value}' is not seeded")
            raise ConfigurationError(f"Global role '{name.value}' is not seeded")
        return role
