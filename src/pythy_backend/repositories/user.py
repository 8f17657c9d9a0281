"""
User repository.

User creation runs the bootstrap role assignment and the institution domain
match in the same transaction as the insert.
"""

import logging
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, Query

from .base import BaseRepository, DuplicateError, RepositoryError
from ..model.auth import User
from ..permissions.bootstrap import BootstrapPolicy
from ..permissions.institutions import InstitutionDomainResolver

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session, bootstrap: Optional[BootstrapPolicy] = None):
        super().__init__(db, User)
        self.bootstrap = bootstrap or BootstrapPolicy(db)
        self.resolver = InstitutionDomainResolver(db)

    def create(self, user: User) -> User:
        """
        Register a new user.

        The global role is decided before the row is added so that the user
        count does not include the new user.

        Raises:
            DuplicateError: If the e-mail address is already registered
        """
        if user.global_role is None and user.global_role_id is None:
            self.bootstrap.assign_initial_role(user)
        self.resolver.apply(user)

        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(User.__name__, {"email": user.email})
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to create User: {str(e)}")

        logger.info(f"Created user {user.email} with global role {user.global_role_id}")
        return user

    def save(self, user: User) -> User:
        """Persist changes to an existing user; fills in a missing institution"""
        self.resolver.apply(user)
        try:
            self.db.commit()
            self.db.refresh(user)
            return user
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to update User: {str(e)}")

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email)

    def search(self, query: Optional[str] = None) -> Query:
        """Users whose e-mail, last or first name contains ``query``; all users for a blank query"""
        result = self.db.query(User)
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            result = result.filter(or_(
                User.email.ilike(pattern),
                User.last_name.ilike(pattern),
                User.first_name.ilike(pattern),
            ))
        return result

    def alphabetical(self, query: Optional[Query] = None) -> Query:
        query = query if query is not None else self.db.query(User)
        return query.order_by(User.last_name.asc(), User.first_name.asc(), User.email.asc())

    def all_emails(self, prefix: str = "") -> List[str]:
        rows = (
            self.db.query(User.email)
            .filter(User.email.ilike(f"{prefix}%"))
            .distinct()
            .order_by(User.email.asc())
            .all()
        )
        return [email for (email,) in rows]
