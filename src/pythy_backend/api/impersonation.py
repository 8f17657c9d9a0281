from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pythy_backend.api.auth import get_impersonation_session
from pythy_backend.database import get_db
from pythy_backend.interface.system import ImpersonationStatus
from pythy_backend.model.auth import User
from pythy_backend.permissions.impersonation import ImpersonationSession, impersonation_registry

impersonation_router = APIRouter()

def _status(session: ImpersonationSession) -> ImpersonationStatus:
    return ImpersonationStatus(
        impersonating=session.is_impersonating,
        true_actor_id=session.true_actor.id,
        effective_actor_id=session.effective_actor.id,
        target_email=session.effective_actor.email if session.is_impersonating else None
    )

@impersonation_router.get("", response_model=ImpersonationStatus)
def get_impersonation(session: Annotated[ImpersonationSession, Depends(get_impersonation_session)]):
    return _status(session)

@impersonation_router.post("/{user_id}", response_model=ImpersonationStatus)
def start_impersonation(
    user_id: str,
    session: Annotated[ImpersonationSession, Depends(get_impersonation_session)],
    db: Session = Depends(get_db)
):
    session.start(db.get(User, user_id))
    impersonation_registry.set(session.true_actor.id, user_id)
    return _status(session)

@impersonation_router.delete("", response_model=ImpersonationStatus)
def stop_impersonation(session: Annotated[ImpersonationSession, Depends(get_impersonation_session)]):
    session.stop()
    impersonation_registry.clear(session.true_actor.id)
    return _status(session)
