import logging
from typing import Generator
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from pythy_backend.settings import settings

logger = logging.getLogger(__name__)

_database_options = {
    "pool_pre_ping": True,
}

if settings.DATABASE_URL.startswith("sqlite"):
    _database_options["connect_args"] = {"check_same_thread": False}
else:
    _database_options.update({
        "pool_size": 10,
        "max_overflow": 5,
        "pool_timeout": 30,
        "pool_recycle": 300
    })

def enable_sqlite_savepoints(engine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINTs work on the pysqlite driver"""

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

_engine = create_engine(settings.DATABASE_URL, **_database_options)
if _engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(_engine)
_SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

def get_db() -> Generator[Session, None, None]:

    db = _SessionLocal()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()

def init_db(engine=None) -> None:
    """Create all tables and seed the role catalog"""
    from pythy_backend.model import Base
    from pythy_backend.permissions.catalog import role_catalog

    engine = engine or _engine
    Base.metadata.create_all(engine)

    with Session(engine) as db:
        role_catalog.seed(db)
