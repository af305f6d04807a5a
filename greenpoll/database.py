"""Database session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from greenpoll.config import get_settings
from greenpoll.errors import ConflictError, InternalError, ServiceError

logger = logging.getLogger("greenpoll")

settings = get_settings()
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, error_message: str, conflict_message: str | None = None) -> Iterator[Session]:
    """Run the block as one transaction and commit it.

    Storage failures are rolled back and re-raised as ``InternalError`` with
    ``error_message``. When ``conflict_message`` is given, an ``IntegrityError``
    becomes a ``ConflictError`` instead.
    """
    try:
        yield db
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if conflict_message:
            raise ConflictError(conflict_message) from e
        logger.exception("%s", error_message)
        raise InternalError(error_message) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("%s", error_message)
        raise InternalError(error_message) from e
