import logging
from typing import Optional
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from pythy_backend.model.auth import User
from pythy_backend.model.organization import Institution

logger = logging.getLogger(__name__)


def email_domain(email: Optional[str]) -> Optional[str]:
    """Everything after the first '@', or None when there is no domain part"""
    if not email or "@" not in email:
        return None
    domain = email.split("@", 1)[1]
    return domain or None


class InstitutionDomainResolver:
    """Maps e-mail addresses to institutions by their domain"""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, email: Optional[str]) -> Optional[Institution]:
        domain = email_domain(email)
        if domain is None:
            return None

        # Case-sensitive exact match; duplicates resolve to the oldest row
        return (
            self.db.query(Institution)
            .filter(Institution.domain == domain)
            .order_by(Institution.created_at, Institution.id)
            .first()
        )

    def apply(self, user: User) -> Optional[Institution]:
        """Set the user's institution from their e-mail, only if it is not already set"""
        if user.institution is not None:
            return user.institution

        # Assigned by id only; an explicit clear shows up in the relationship history
        if user.institution_id is not None and not inspect(user).attrs.institution.history.has_changes():
            return None

        institution = self.resolve(user.email)
        if institution is not None:
            user.institution = institution
            logger.debug(f"Matched {user.email} to institution {institution.id}")
        return institution
