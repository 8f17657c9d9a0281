from contextlib import contextmanager
from pythy_backend.database import get_db, init_db

@contextmanager
def database_session():
  """Database session for one CLI command; the schema is created if missing"""
  init_db()
  sessions = get_db()
  db = next(sessions)
  try:
    yield db
  finally:
    sessions.close()
