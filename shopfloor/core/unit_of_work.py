"""
Unit of Work for terminal transactions.

One unit of work wraps one database session. Repositories flush into it and
the unit of work commits on a clean exit or rolls back when the block raises,
so a transition that closes one log, opens the next and updates job
completion either lands completely or not at all.
"""

import logging
from collections.abc import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from shopfloor.core.db import engine
from shopfloor.domain.shared.exceptions import PersistenceError
from shopfloor.infrastructure.database.repositories import (
    EfficiencyMetricRepository,
    JobLogRepository,
    JobOperationRepository,
    RejectReasonRepository,
    RejectRepository,
    TerminalRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Context manager owning a session and the repositories bound to it."""

    def __init__(self, engine_override: Engine | None = None):
        self.session: Session | None = None
        self._engine = engine_override or engine

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork is already active")

        self.session = Session(self._engine)
        self.jobs = JobOperationRepository(self.session)
        self.logs = JobLogRepository(self.session)
        self.efficiency = EfficiencyMetricRepository(self.session)
        self.rejects = RejectRepository(self.session)
        self.reasons = RejectReasonRepository(self.session)
        self.users = UserRepository(self.session)
        self.terminals = TerminalRepository(self.session)
        logger.debug("Transaction %s started", id(self.session))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session is None:
            return

        try:
            if exc_type:
                self.rollback()
                logger.debug(
                    "Transaction %s rolled back due to: %s", id(self.session), exc_val
                )
            else:
                try:
                    self.commit()
                except PersistenceError:
                    self.rollback()
                    raise
        finally:
            self.close()

    def commit(self) -> None:
        """Commit the current transaction."""
        if not self.session:
            raise RuntimeError("No active session to commit")

        try:
            self.session.commit()
            logger.debug("Transaction %s committed", id(self.session))
        except SQLAlchemyError as e:
            logger.error("Commit failed for transaction %s: %s", id(self.session), e)
            raise PersistenceError(f"Commit failed: {e}", "commit") from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        if not self.session:
            raise RuntimeError("No active session to rollback")

        self.session.rollback()

    def close(self) -> None:
        """Close the database session."""
        try:
            if self.session:
                self.session.close()
        finally:
            self.session = None


UnitOfWorkFactory = Callable[[], UnitOfWork]


def unit_of_work_factory(engine: Engine | None = None) -> UnitOfWorkFactory:
    """Build a factory producing units of work bound to engine."""

    def factory() -> UnitOfWork:
        return UnitOfWork(engine)

    return factory
