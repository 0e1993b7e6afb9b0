"""Sessions and transaction boundaries.

Routes get a session per request from get_db(). Services own their commits
through transaction(); repositories only flush.
"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from researchhub.db.engine import get_engine


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Build a sessionmaker.

    Objects stay readable after commit (expire_on_commit=False) so services
    can serialize what they just wrote without another round trip.
    """
    return sessionmaker(
        bind=engine if engine is not None else get_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return create_session_factory()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is closed after the request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[None]:
    """Commit the block's changes, or roll back and re-raise on any error.

    Usage:
        with transaction(db):
            repo.save(row)
    """
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise
