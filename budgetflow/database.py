"""Database engine, session factory and declarative base.

``get_db`` is the FastAPI dependency every router uses; tests override it
with a session bound to an in-memory SQLite engine.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from budgetflow.config import get_settings
from budgetflow.domain.errors import ExternalStoreError

logger = logging.getLogger(__name__)

settings = get_settings()

# SQLite (dev/test) needs a shared connection across threads
if settings.DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session) -> None:
    """Commit *db*; on a store failure roll back and raise ``ExternalStoreError``.

    ``IntegrityError`` is re-raised unchanged so callers can turn unique
    constraint collisions into conflicts or retries.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database commit failed: %s", exc)
        raise ExternalStoreError(str(exc)) from exc


@contextmanager
def store_errors(db: Session, action: str) -> Iterator[None]:
    """Run queries, flushes and bulk updates, translating store failures.

    ``SQLAlchemyError`` raised inside the block rolls *db* back and becomes
    ``ExternalStoreError``. ``IntegrityError`` is re-raised unchanged, as in
    ``commit_or_raise``.

    .. code-block:: python

        with store_errors(db, "list budgets"):
            rows = db.query(Budget).all()
    """
    try:
        yield
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database error during %s: %s", action, exc)
        raise ExternalStoreError(f"Could not {action}: {exc}") from exc
