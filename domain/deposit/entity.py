"""
Deposit entity - one attempted funding transaction
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from domain.common.exceptions import DomainValidationException


class DepositStatus(str, Enum):
    """Deposit lifecycle states"""
    INITIATED = "initiated"   # record written, gateway not yet answered
    PENDING = "pending"       # payment URL handed to the client
    APPROVED = "approved"     # balance credited (terminal)


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def build_reference(deposit_id: str, *, prefix: str = "CH", now: Optional[datetime] = None) -> str:
    """Gateway reference embedding the creation time (epoch ms) and the deposit id."""
    moment = now or datetime.now(timezone.utc)
    return f"{prefix}_{int(moment.timestamp() * 1000)}_{deposit_id}"


@dataclass
class Deposit:
    """
    Deposit aggregate

    Rules:
    1. amount is a positive integer in minor units
    2. status only moves forward and approved is terminal; the repository
       enforces this in its conditional writes
    """

    id: str
    user_id: str
    email: str
    amount: int
    method: str
    reference: str
    status: DepositStatus = DepositStatus.INITIATED
    payment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
            raise DomainValidationException(
                f"Deposit amount must be a positive integer: {self.amount!r}",
                field="amount",
            )
        self.status = DepositStatus(self.status)
        self.created_at = _ensure_utc(self.created_at)
        self.paid_at = _ensure_utc(self.paid_at)

    @classmethod
    def initiate(
        cls,
        *,
        deposit_id: str,
        user_id: str,
        email: str,
        amount: int,
        method: str,
        reference_prefix: str = "CH",
        now: Optional[datetime] = None,
    ) -> "Deposit":
        created = now or datetime.now(timezone.utc)
        return cls(
            id=deposit_id,
            user_id=user_id,
            email=email,
            amount=amount,
            method=method,
            reference=build_reference(deposit_id, prefix=reference_prefix, now=created),
            status=DepositStatus.INITIATED,
            created_at=created,
        )

    @property
    def is_approved(self) -> bool:
        return self.status is DepositStatus.APPROVED
