"""
Webhook reconciliation use-case.

Turns a gateway success notification into exactly one balance credit.
Duplicate or racing deliveries are stopped by the conditional deposit
update; concurrent credits to the same user are serialised by the
balance version check and retried as a whole transaction.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from application.dtos.deposits import WebhookEvent, WebhookOutcome
from core.logging_config import get_logger
from domain.common.exceptions import (
    BalanceConflictException,
    DepositAlreadyProcessedException,
    DepositNotFoundException,
    UserNotFoundException,
)
from domain.common.unit_of_work import AbstractUnitOfWork


logger = get_logger(__name__)


class DepositReconciliationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        max_attempts: int = 5,
        backoff: float = 0.05,
        retry_on: tuple[type[BaseException], ...] = (BalanceConflictException,),
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max(1, int(max_attempts))
        self._backoff = backoff
        # extra transient errors (e.g. driver lock timeouts) are supplied by the caller
        self._retry_on = tuple(retry_on)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def reconcile(self, event: Optional[WebhookEvent]) -> WebhookOutcome:
        if event is None or not event.succeeded:
            logger.info("webhook_ignored", status=getattr(event, "status", None))
            return WebhookOutcome.IGNORED

        deposit_id = event.deposit_id
        if not deposit_id:
            logger.warning("webhook_missing_deposit_id", reference=event.reference)
            return WebhookOutcome.NO_DEPOSIT_ID

        async with self._uow_factory(readonly=True) as uow:
            deposit = await uow.deposit_repository.get_by_id(deposit_id)
        if deposit is None:
            logger.warning("webhook_deposit_not_found", deposit_id=deposit_id)
            return WebhookOutcome.DEPOSIT_NOT_FOUND
        if deposit.is_approved:
            logger.info("webhook_duplicate_ignored", deposit_id=deposit_id)
            return WebhookOutcome.ALREADY_PROCESSED

        try:
            new_balance = await self._credit_with_retry(deposit_id)
        except DepositAlreadyProcessedException:
            logger.info("webhook_duplicate_ignored", deposit_id=deposit_id, raced=True)
            return WebhookOutcome.ALREADY_PROCESSED

        logger.info("deposit_approved", deposit_id=deposit_id, user_id=deposit.user_id, balance=new_balance)
        return WebhookOutcome.OK

    async def _credit_with_retry(self, deposit_id: str) -> int:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff, min=self._backoff, max=1.0),
            retry=retry_if_exception_type(self._retry_on),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "balance_conflict_retry",
                        deposit_id=deposit_id,
                        attempt=attempt.retry_state.attempt_number,
                    )
                return await self._credit(deposit_id)

    async def _credit(self, deposit_id: str) -> int:
        """One transaction: approve the deposit and add its amount to the balance."""
        async with self._uow_factory() as uow:
            deposit = await uow.deposit_repository.get_by_id(deposit_id)
            if deposit is None:
                raise DepositNotFoundException(deposit_id)
            if deposit.is_approved:
                raise DepositAlreadyProcessedException(deposit_id)

            user = await uow.user_repository.get_by_id(deposit.user_id)
            if user is None:
                raise UserNotFoundException(deposit.user_id)

            if not await uow.deposit_repository.mark_approved(deposit_id, self._clock()):
                raise DepositAlreadyProcessedException(deposit_id)

            new_balance = user.credited(deposit.amount)
            if not await uow.user_repository.compare_and_set_balance(
                user.id, expected_version=user.version, balance=new_balance
            ):
                raise BalanceConflictException(user.id, user.version)
            return new_balance
