"""
User account entity - only the balance side of a user
"""
from dataclasses import dataclass
from typing import Optional

from domain.common.exceptions import DomainValidationException


@dataclass
class UserAccount:
    """Balance holder. Users themselves are registered by the client app."""

    id: str
    balance: Optional[int] = None
    version: int = 0

    @property
    def current_balance(self) -> int:
        # a user that never received a deposit has no balance yet
        return self.balance or 0

    def credited(self, amount: int) -> int:
        """Balance after adding a deposit amount; the entity itself is unchanged."""
        if amount <= 0:
            raise DomainValidationException(
                f"Credit amount must be positive: {amount}",
                field="amount",
            )
        return self.current_balance + amount
