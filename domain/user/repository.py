"""
User account repository contract
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import UserAccount


class UserAccountRepository(ABC):

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[UserAccount]:
        pass

    @abstractmethod
    async def compare_and_set_balance(self, user_id: str, *, expected_version: int, balance: int) -> bool:
        """Write the balance only if the row still has expected_version.

        Returns False when another transaction got there first.
        """
        pass
