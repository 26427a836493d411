"""Infrastructure models package exports."""
from .base import Base, metadata
from .user import UserModel
from .deposit import DepositModel

__all__ = [
    "Base",
    "metadata",
    "UserModel",
    "DepositModel",
]
