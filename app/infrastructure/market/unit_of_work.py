"""
Adapter: SQLAlchemy unit of work.

Opens one Session (one database transaction) per ``with`` block and wires
the repositories to it. Driver errors that mean "gave up waiting on a
lock" are translated into StoreContentionError; every other error passes
through untouched after the rollback.
"""

import logging
from types import TracebackType
from typing import Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.market.errors import StoreContentionError
from app.domain.market.ports import MarketUnitOfWork
from app.infrastructure.market.database import is_contention_error
from app.infrastructure.market.repositories import (
    SqlAlchemyListingRepository,
    SqlAlchemyPlayerRepository,
    SqlAlchemyTeamRepository,
    SqlAlchemyTransferHistoryRepository,
    SqlAlchemyUserRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(MarketUnitOfWork):
    """Transactional boundary over the relational entity store."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.listings = SqlAlchemyListingRepository(self._session)
        self.players = SqlAlchemyPlayerRepository(self._session)
        self.teams = SqlAlchemyTeamRepository(self._session)
        self.users = SqlAlchemyUserRepository(self._session)
        self.history = SqlAlchemyTransferHistoryRepository(self._session)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        try:
            self.rollback()
        finally:
            if self._session is not None:
                self._session.close()
                self._session = None

        if isinstance(exc_val, DBAPIError) and is_contention_error(exc_val):
            logger.warning("Store contention: %s", exc_val.orig)
            raise StoreContentionError(str(exc_val.orig)) from exc_val

    def commit(self) -> None:
        if self._session is None:
            raise RuntimeError("Unit of work used outside of a 'with' block")
        try:
            self._session.commit()
        except DBAPIError as exc:
            if is_contention_error(exc):
                raise StoreContentionError(str(exc.orig)) from exc
            raise

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()
