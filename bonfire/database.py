"""
Database connection and session management for the SQL store.

Provides:
- create_session_factory(): engine + sessionmaker for a database URL
- get_db(): context manager for a session with rollback on error
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from .models import Base


def create_session_factory(database_url: str, create_tables: bool = True) -> sessionmaker:
    """
    Create a session factory bound to ``database_url``.

    Args:
        database_url: SQLAlchemy URL (e.g. "postgresql://..." or "sqlite:///:memory:")
        create_tables: Create the workflows/integrations tables if missing

    Returns:
        sessionmaker producing Session objects
    """
    engine_kwargs = {"echo": False}
    if database_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        from sqlalchemy.pool import StaticPool
        engine_kwargs.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        # pool_pre_ping=True ensures connections are valid before using them
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **engine_kwargs)

    if create_tables:
        Base.metadata.create_all(engine)

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db(SessionLocal) as db:
            record = db.get(WorkflowRecord, workflow_id)
            db.commit()

    The session is closed when exiting the context, and rolled back if an
    exception occurs.
    """
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
