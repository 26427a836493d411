"""
Deposit initiation use-case.

Depends only on the unit-of-work abstraction and the PaymentGateway port;
concrete implementations are injected from the composition root (API).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from application.dtos.deposits import GatewaySessionRequest, InitDepositRequest
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger
from core.settings import PaymentSettings
from domain.common.exceptions import (
    DepositAlreadyProcessedException,
    InvalidAmountException,
    MissingFieldsException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.deposit.entity import Deposit


logger = get_logger(__name__)


class DepositService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway: PaymentGateway,
        settings: PaymentSettings,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self.gateway = gateway
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _validate(self, req: InitDepositRequest) -> None:
        min_amount = self.settings.deposit.min_amount
        if not req.amount or req.amount < min_amount:
            raise InvalidAmountException(min_amount, req.amount)
        missing = [
            name
            for name, value in (("email", req.email), ("depositId", req.deposit_id), ("userId", req.user_id))
            if not value
        ]
        if missing:
            raise MissingFieldsException(missing)

    async def initiate(self, req: InitDepositRequest) -> str:
        """Open a gateway session for the deposit and return its payment URL."""
        self._validate(req)
        deposit = Deposit.initiate(
            deposit_id=req.deposit_id,
            user_id=req.user_id,
            email=req.email,
            amount=req.amount,
            method=self.settings.deposit.method,
            reference_prefix=self.settings.deposit.reference_prefix,
            now=self._clock(),
        )

        # Committed before the gateway call so a record exists even if it fails
        async with self._uow_factory() as uow:
            if not await uow.deposit_repository.save(deposit):
                raise DepositAlreadyProcessedException(deposit.id)
        logger.info(
            "deposit_initiated",
            deposit_id=deposit.id,
            user_id=deposit.user_id,
            amount=deposit.amount,
            reference=deposit.reference,
        )

        cfg = self.settings.xixapay
        session = await self.gateway.create_session(
            GatewaySessionRequest(
                amount=deposit.amount,
                email=deposit.email,
                reference=deposit.reference,
                callback_url=cfg.callback_url,
                redirect_url=cfg.redirect_url,
                metadata={"depositId": deposit.id},
            )
        )

        async with self._uow_factory() as uow:
            status = await uow.deposit_repository.attach_payment_url(deposit.id, session.payment_url)
            if status is None:
                raise RuntimeError(f"Deposit {deposit.id} disappeared before its payment URL was stored")
        logger.info(
            "deposit_session_opened",
            deposit_id=deposit.id,
            provider=session.provider,
            status=status.value,
        )
        return session.payment_url
