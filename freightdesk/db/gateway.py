"""Persistence gateway: the only path from operations to the store.

Every statement runs through a PersistenceGateway. Store failures are
logged and re-raised as PersistenceError with a prefix naming the failing
logical operation ("Failed to add quote: <cause>"). There are no retries.

Example:
    gateway = PersistenceGateway(session_factory)

    quotes = gateway.execute(
        select(Quote).where(Quote.shipment_id == shipment_id),
        "Failed to fetch quotes",
    )

    with gateway.transaction("Failed to select quote") as session:
        ...  # several statements, committed together
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Executable, Select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from freightdesk.errors import PersistenceError

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Parameterized statement execution against the relational store."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize with a session factory.

        Args:
            session_factory: Factory from create_session_factory().
        """
        self._session_factory = session_factory

    @contextmanager
    def transaction(self, operation: str) -> Iterator[Session]:
        """Run a block of statements as one atomic unit.

        Commits when the block exits normally. Any exception rolls back;
        SQLAlchemy errors are wrapped in PersistenceError, everything else
        (e.g. a NotFoundError raised mid-block) propagates unchanged.

        Args:
            operation: Prefix for the error message, e.g. "Failed to add quote".

        Yields:
            An open Session bound to the transaction.
        """
        session = self._session_factory()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error("%s: %s", operation, e)
            raise PersistenceError(operation, str(e)) from e
        finally:
            session.close()

    def execute(self, statement: Executable, operation: str) -> list[Any]:
        """Execute a single statement in its own transaction.

        Args:
            statement: A SQLAlchemy Core or ORM statement (bound parameters).
            operation: Prefix for the error message on failure.

        Returns:
            Scalar results for SELECT statements (ORM entities for
            select(Model), plain values for column selects), else [].
        """
        with self.transaction(operation) as session:
            result = session.execute(statement)
            if isinstance(statement, Select):
                return list(result.scalars().all())
            return []

    def ping(self) -> bool:
        """Check the store is reachable.

        Returns:
            True if SELECT 1 succeeds, False otherwise.
        """
        try:
            self.execute(text("SELECT 1"), "Database health check failed")
        except PersistenceError:
            return False
        return True
