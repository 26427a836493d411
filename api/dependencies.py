"""
API dependencies: settings, unit of work and application services.

Everything is resolved from `app.state`, populated once in the lifespan,
so handlers never read module-level configuration.
"""
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.exc import OperationalError

from application.ports.payment_gateway import PaymentGateway
from application.services.deposit_service import DepositService
from application.services.reconciliation_service import DepositReconciliationService
from core.settings import PaymentSettings
from domain.common.exceptions import BalanceConflictException
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.unit_of_work import unit_of_work_factory


def get_payment_settings_dep(request: Request) -> PaymentSettings:
    return request.app.state.payment_settings


def get_uow_factory(request: Request) -> Callable[..., AbstractUnitOfWork]:
    return unit_of_work_factory(request.app.state.session_factory)


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


async def get_deposit_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    gateway: PaymentGateway = Depends(get_gateway),
    settings: PaymentSettings = Depends(get_payment_settings_dep),
) -> DepositService:
    return DepositService(uow_factory, gateway, settings)


async def get_reconciliation_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    settings: PaymentSettings = Depends(get_payment_settings_dep),
) -> DepositReconciliationService:
    # sqlite reports lock contention as OperationalError; retry it like a version conflict
    return DepositReconciliationService(
        uow_factory,
        max_attempts=settings.deposit.transaction_max_attempts,
        retry_on=(BalanceConflictException, OperationalError),
    )
