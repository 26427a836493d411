"""
User balance table mapping
"""
from sqlalchemy import Column, BigInteger, Integer, String

from .base import Base


class UserModel(Base):
    """
    Only the columns this service reads and writes. Rows are created by the
    client application; balance is written solely by deposit reconciliation.
    """
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    balance = Column(BigInteger, nullable=True, comment="Minor currency units")
    # Optimistic concurrency counter, bumped on every balance write
    version = Column(Integer, nullable=False, default=0, server_default="0")

    def __repr__(self):
        return f"<UserModel(id={self.id!r}, balance={self.balance}, version={self.version})>"
