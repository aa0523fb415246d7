"""
Database handle: owns the SQLAlchemy engine (connection pool) and session
factory, and runs compound mutations as a single transaction.

A ``Database`` is built by the composition root (or by a test) and passed to
everything that touches the store; nothing here is created at import time.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from dealership.core.config import Settings
from dealership.core.result import Err, ErrorKind, Result

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# Create Base class for declarative class definitions
Base = declarative_base()


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the driver reports a duplicate key rather than a broken reference or NOT NULL"""
    code = getattr(error.orig, "pgcode", None) or getattr(error.orig, "sqlstate", None)
    if code:
        return code == UNIQUE_VIOLATION
    # SQLite carries no SQLSTATE
    return "UNIQUE constraint failed" in str(error.orig)


class Database:
    """Connection pool handle with transaction support"""

    def __init__(self, url: str, **engine_kwargs: Any):
        engine_kwargs.setdefault("pool_pre_ping", True)  # Test connections for liveness when checked out
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info(f"Database engine created for {self.engine.url.render_as_string(hide_password=True)}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            str(settings.SQLALCHEMY_DATABASE_URI),
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Read-only session; the connection goes back to the pool on exit.

        Usage:
            with database.session() as session:
                session.query(Vehicle).all()
        """
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def transaction(self, body: Callable[[Session], Result]) -> Result:
        """
        Run ``body`` as one all-or-nothing unit.

        The body receives a session bound to a single pooled connection. An
        ``Ok`` result commits; an ``Err`` result or any exception rolls back
        every statement issued so far. The connection is released in all cases.

        Args:
            body: Callable issuing the statements and returning a Result

        Returns:
            The body's result; a CONFLICT ``Err`` on a duplicate key, a
            VALIDATION ``Err`` on any other constraint violation, an INTERNAL
            ``Err`` if it raised anything else
        """
        session = self.session_factory()
        try:
            result = body(session)
            if isinstance(result, Err):
                session.rollback()
                logger.info(f"Transaction rolled back: {result.detail}")
            else:
                session.commit()
            return result
        except IntegrityError as e:
            session.rollback()
            logger.warning(f"Transaction hit a constraint violation: {e.orig}")
            if is_unique_violation(e):
                return Err(ErrorKind.CONFLICT, "Conflicting record already exists")
            return Err(ErrorKind.VALIDATION, "Request violates a data constraint")
        except Exception as e:
            session.rollback()
            logger.exception(f"Transaction failed and was rolled back: {e}")
            return Err(ErrorKind.INTERNAL, "Internal server error")
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections"""
        self.engine.dispose()
        logger.info("Database connection pool closed")
