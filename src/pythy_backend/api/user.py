from typing import Annotated
from fastapi import APIRouter, Depends

from pythy_backend.api.auth import get_impersonation_session
from pythy_backend.interface.users import CurrentUserGet, UserGet
from pythy_backend.permissions.impersonation import ImpersonationSession

user_router = APIRouter()

@user_router.get("", response_model=CurrentUserGet)
def get_current_user(session: Annotated[ImpersonationSession, Depends(get_impersonation_session)]):
    """Get the identity in effect and the authenticated identity behind it"""
    return CurrentUserGet(
        user=UserGet.model_validate(session.effective_actor),
        true_actor=UserGet.model_validate(session.true_actor),
        impersonating=session.is_impersonating
    )
