import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pythy_backend.api.auth import require_setup_complete
from pythy_backend.api.course_offerings import course_offering_router
from pythy_backend.api.impersonation import impersonation_router
from pythy_backend.api.setup import setup_router
from pythy_backend.api.user import user_router
from pythy_backend.database import init_db
from pythy_backend.settings import settings

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"Backend started in {settings.DEBUG_MODE} mode")
    yield

app = FastAPI(lifespan=lifespan)

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(
    setup_router,
    prefix="/setup",
    tags=["setup"]
)

app.include_router(
    user_router,
    prefix="/user",
    tags=["user"],
    dependencies=[Depends(require_setup_complete)]
)

app.include_router(
    course_offering_router,
    prefix="/course-offerings",
    tags=["course offerings"],
    dependencies=[Depends(require_setup_complete)]
)

if settings.ENABLE_IMPERSONATION:
    app.include_router(
        impersonation_router,
        prefix="/impersonation",
        tags=["impersonation"],
        dependencies=[Depends(require_setup_complete)]
    )
