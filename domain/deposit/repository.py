"""
Deposit repository contract
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .entity import Deposit, DepositStatus


class DepositRepository(ABC):
    """Deposit persistence. Status-changing writes are conditional so the
    forward-only rule holds even across concurrent transactions."""

    @abstractmethod
    async def save(self, deposit: Deposit) -> bool:
        """Insert the deposit, or overwrite the details of an unapproved one.

        A stored status is never changed here. Returns False when the stored
        deposit is already approved; nothing is written in that case.
        """
        pass

    @abstractmethod
    async def get_by_id(self, deposit_id: str) -> Optional[Deposit]:
        pass

    @abstractmethod
    async def attach_payment_url(self, deposit_id: str, payment_url: str) -> Optional[DepositStatus]:
        """Store the payment URL and move initiated -> pending.

        Returns the resulting status, or None when the deposit does not exist.
        An already approved deposit keeps its status.
        """
        pass

    @abstractmethod
    async def mark_approved(self, deposit_id: str, paid_at: datetime) -> bool:
        """Move the deposit to approved unless it already is.

        Returns False when another writer approved it first.
        """
        pass
