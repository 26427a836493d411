"""Unit of Work abstraction"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.deposit.repository import DepositRepository
from domain.user.repository import UserAccountRepository


class AbstractUnitOfWork(ABC):
    """Transaction boundary for the application layer.

    Leaving the context commits, unless an exception escaped, in which case
    everything written inside it is rolled back.
    """

    deposit_repository: DepositRepository
    user_repository: UserAccountRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly
        self.deposit_repository = None  # type: ignore[assignment]
        self.user_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            if not self._readonly and not self._committed:
                await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
