"""Deposit aggregate: entity, status machine and repository contract."""
from .entity import Deposit, DepositStatus, build_reference
from .repository import DepositRepository

__all__ = ["Deposit", "DepositStatus", "DepositRepository", "build_reference"]
