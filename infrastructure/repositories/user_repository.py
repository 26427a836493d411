"""
User balance repository backed by SQLAlchemy
"""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.user.entity import UserAccount
from domain.user.repository import UserAccountRepository
from infrastructure.models.user import UserModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyUserAccountRepository(UserAccountRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: UserModel) -> UserAccount:
        return UserAccount(
            id=model.id,
            balance=int(model.balance) if model.balance is not None else None,
            version=model.version or 0,
        )

    async def get_by_id(self, user_id: str) -> Optional[UserAccount]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def compare_and_set_balance(self, user_id: str, *, expected_version: int, balance: int) -> bool:
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.version == expected_version)
            .values(balance=balance, version=UserModel.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.info(
                "balance_version_mismatch",
                user_id=user_id,
                expected_version=expected_version,
            )
            return False
        return True
