"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the database holding reference data tables.
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose `get_session_factory()` for the default storage collaborator and a
  FastAPI dependency `get_db()` that yields a session per-request.

Key Characteristics:
- Synchronous SQLAlchemy engine.
- No migrations — reference tables are expected to already exist.
- Sessions do not expire on commit so detached cached rows keep their values.

This module does NOT:
- Define ORM models.
- Perform any queries or business logic.
"""

from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from refdata.core.config import settings

# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------

# Only create engine if REFDATA_DB_URL is provided; types declared with an
# explicit session factory never touch this module's engine.
db_url = settings.REFDATA_DB_URL

engine: Optional[Engine]
SessionLocal: Optional[sessionmaker]

if not db_url:
    engine = None
    SessionLocal = None
else:
    # Use psycopg (v3) driver for bare postgresql:// URLs
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)

    engine = create_engine(
        db_url,
        pool_pre_ping=True  # Ensures connections are valid before use
    )

    # Session factory
    SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


def get_session_factory() -> sessionmaker:
    """
    Return the configured session factory.

    Raises:
        RuntimeError: If database is not configured (REFDATA_DB_URL is empty)
    """
    if SessionLocal is None:
        raise RuntimeError(
            "Database is not configured. Please set REFDATA_DB_URL environment variable, "
            "or pass session_factory= when declaring the reference data type."
        )
    return SessionLocal

# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            FooType.reference.fetch("BAR", session=db)
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
