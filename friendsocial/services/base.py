"""
Shared transaction handling for service classes.

Every public service operation runs in exactly one transaction opened from
an injected session factory. Database errors leave the service as
PersistenceError after the transaction has been rolled back.
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from datetime import datetime, timezone
from typing import Callable, Generator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from friendsocial.database import session_scope
from friendsocial.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class TransactionalService:
    """
    Base class for services that own their transactions.

    Args:
        session_factory: Factory for new sessions
        clock: Returns "now" (aware); injectable for tests
        serialize_writes: Also serialize mutating calls on this instance
            with a process-local lock. The transaction stays the only
            correctness guarantee across processes.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Optional[Callable[[], datetime]] = None,
        serialize_writes: bool = False,
    ):
        self._session_factory = session_factory
        self._clock = clock or utc_now
        self._write_lock = threading.Lock() if serialize_writes else None

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    @contextmanager
    def _transaction(self, operation: str, writes: bool = True, **context) -> Generator[Session, None, None]:
        """
        Open one transaction for ``operation``.

        Commits on success, rolls back on any exception. SQLAlchemy errors
        are re-raised as PersistenceError carrying the operation and inputs.
        """
        lock = self._write_lock if (writes and self._write_lock is not None) else nullcontext()
        with lock:
            try:
                with session_scope(self._session_factory) as session:
                    # Entities are handed back to callers after the session closes
                    session.expire_on_commit = False
                    yield session
            except PersistenceError:
                raise
            except SQLAlchemyError as e:
                logger.error(f"{operation} failed: {e} (inputs: {context})", exc_info=True)
                raise PersistenceError(
                    f"Failed to {operation}: {e}",
                    original_error=e,
                    context={"operation": operation, **context},
                ) from e
