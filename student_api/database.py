"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` (a local SQLite file by default) and provides the
session dependency used by the HTTP handlers.
"""

from sqlmodel import SQLModel, create_engine, Session

from .config import settings

if settings.DATABASE_URL.startswith("sqlite"):
    engine = create_engine(settings.DATABASE_URL, echo=False, connect_args={"check_same_thread": False})
else:
    engine = create_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)


def create_db_and_tables():
    """Create database tables using SQLModel metadata.

    Catalog rows (careers, subjects, professorships) are provisioned
    separately by `run_migrations.py`.
    """
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
