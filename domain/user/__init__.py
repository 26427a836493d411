from .entity import UserAccount
from .repository import UserAccountRepository

__all__ = ["UserAccount", "UserAccountRepository"]
