"""
Deposit repository backed by SQLAlchemy
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.deposit.entity import Deposit, DepositStatus
from domain.deposit.repository import DepositRepository
from infrastructure.models.deposit import DepositModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyDepositRepository(DepositRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: DepositModel) -> Deposit:
        return Deposit(
            id=model.id,
            user_id=model.user_id,
            email=model.email,
            amount=int(model.amount),
            method=model.method,
            reference=model.reference,
            status=DepositStatus(model.status),
            payment_url=model.payment_url,
            created_at=model.created_at,
            paid_at=model.paid_at,
        )

    async def save(self, deposit: Deposit) -> bool:
        """Insert the deposit, or overwrite an unapproved one keeping its status.

        Returns False, writing nothing, when the stored deposit is approved.
        """
        refreshed = await self.session.execute(
            update(DepositModel)
            .where(
                DepositModel.id == deposit.id,
                DepositModel.status != DepositStatus.APPROVED.value,
            )
            .values(
                user_id=deposit.user_id,
                email=deposit.email,
                amount=deposit.amount,
                method=deposit.method,
                reference=deposit.reference,
                created_at=deposit.created_at,
            )
            .execution_options(synchronize_session=False)
        )
        if not refreshed.rowcount:
            exists = await self.session.execute(
                select(DepositModel.id).where(DepositModel.id == deposit.id)
            )
            if exists.scalar_one_or_none() is not None:
                return False
            self.session.add(
                DepositModel(
                    id=deposit.id,
                    user_id=deposit.user_id,
                    email=deposit.email,
                    amount=deposit.amount,
                    method=deposit.method,
                    reference=deposit.reference,
                    status=deposit.status.value,
                    payment_url=deposit.payment_url,
                    created_at=deposit.created_at,
                    paid_at=deposit.paid_at,
                )
            )
            await self.session.flush()

        logger.info(
            "deposit_saved",
            deposit_id=deposit.id,
            user_id=deposit.user_id,
            resubmitted=bool(refreshed.rowcount),
        )
        return True

    async def get_by_id(self, deposit_id: str) -> Optional[Deposit]:
        result = await self.session.execute(
            select(DepositModel).where(DepositModel.id == deposit_id)
        )
        db_deposit = result.scalar_one_or_none()
        return self._to_entity(db_deposit) if db_deposit else None

    async def attach_payment_url(self, deposit_id: str, payment_url: str) -> Optional[DepositStatus]:
        moved = await self.session.execute(
            update(DepositModel)
            .where(
                DepositModel.id == deposit_id,
                DepositModel.status == DepositStatus.INITIATED.value,
            )
            .values(payment_url=payment_url, status=DepositStatus.PENDING.value)
            .execution_options(synchronize_session=False)
        )
        if moved.rowcount:
            return DepositStatus.PENDING

        # Already pending (resubmission) or approved (callback won the race):
        # keep the status, only record the URL.
        touched = await self.session.execute(
            update(DepositModel)
            .where(DepositModel.id == deposit_id)
            .values(payment_url=payment_url)
            .execution_options(synchronize_session=False)
        )
        if not touched.rowcount:
            return None
        result = await self.session.execute(
            select(DepositModel.status).where(DepositModel.id == deposit_id)
        )
        return DepositStatus(result.scalar_one())

    async def mark_approved(self, deposit_id: str, paid_at: datetime) -> bool:
        result = await self.session.execute(
            update(DepositModel)
            .where(
                DepositModel.id == deposit_id,
                DepositModel.status != DepositStatus.APPROVED.value,
            )
            .values(status=DepositStatus.APPROVED.value, paid_at=paid_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
