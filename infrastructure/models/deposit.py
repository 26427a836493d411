"""
Deposit table mapping. Business rules live in domain.deposit.entity.
"""
from sqlalchemy import Column, BigInteger, String, DateTime, Index
from datetime import datetime, timezone

from .base import Base


class DepositModel(Base):
    __tablename__ = "deposits"

    # Caller supplied deposit id
    id = Column(String(128), primary_key=True)
    user_id = Column(String(128), nullable=False, index=True, comment="Owner user id")
    email = Column(String(255), nullable=False)
    amount = Column(BigInteger, nullable=False, comment="Minor currency units")
    method = Column(String(32), nullable=False)
    reference = Column(String(255), nullable=False, unique=True, comment="Gateway session reference")
    status = Column(String(20), nullable=False, default="initiated", comment="initiated/pending/approved")
    payment_url = Column(String(1024), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    paid_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_deposits_status_created", "status", "created_at"),
    )

    def __repr__(self):
        return f"<DepositModel(id={self.id!r}, user_id={self.user_id!r}, status={self.status!r})>"
