"""SQLAlchemy Unit of Work"""
from __future__ import annotations

from typing import Optional, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.repositories.deposit_repository import SQLAlchemyDepositRepository
from infrastructure.repositories.user_repository import SQLAlchemyUserAccountRepository


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """One session, one transaction per `async with` block."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        self.deposit_repository = SQLAlchemyDepositRepository(self.session)
        self.user_repository = SQLAlchemyUserAccountRepository(self.session)
        if not self._readonly:
            await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            if self._external_session is None and self.session is not None:
                await self.session.close()
                self.session = None
            self.deposit_repository = None  # type: ignore[assignment]
            self.user_repository = None  # type: ignore[assignment]

    async def commit(self) -> None:
        if self._readonly:
            self._committed = True
            return
        if self.session and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False


def unit_of_work_factory(session_factory: Callable[[], AsyncSession]) -> Callable[..., SQLAlchemyUnitOfWork]:
    """Bind a session factory so services can call `uow_factory(readonly=...)`."""

    def _factory(*, readonly: bool = False) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory, readonly=readonly)

    return _factory
