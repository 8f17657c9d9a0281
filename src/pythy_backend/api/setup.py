import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pythy_backend.api.exceptions import ConflictException
from pythy_backend.database import get_db
from pythy_backend.interface.system import SetupStatus
from pythy_backend.interface.users import UserCreate, UserGet
from pythy_backend.model.auth import User
from pythy_backend.permissions.bootstrap import BootstrapPolicy
from pythy_backend.repositories.base import DuplicateError
from pythy_backend.repositories.user import UserRepository

logger = logging.getLogger(__name__)

setup_router = APIRouter()

@setup_router.get("", response_model=SetupStatus)
def get_setup_status(db: Session = Depends(get_db)):
    return SetupStatus(setup_required=BootstrapPolicy(db).needs_initial_setup())

@setup_router.post("", response_model=UserGet, status_code=201)
def create_initial_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create the first account, which becomes the administrator"""
    bootstrap = BootstrapPolicy(db)

    if not bootstrap.needs_initial_setup():
        raise ConflictException("Initial setup has already been completed")

    try:
        user = UserRepository(db, bootstrap=bootstrap).create(User(**payload.model_dump()))
    except DuplicateError:
        raise ConflictException("User already exists")

    logger.info(f"Initial setup completed by {user.email}")
    return user
