"""
Database session management utilities.
"""

from typing import Generator

from sqlalchemy.orm import Session

# Re-export SessionLocal from base
from familyhub.db.base import SessionLocal, Base, engine


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables. Used for local development and tests."""
    import familyhub.models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=engine)
