"""
Deposit API routes.

`/init-xixipay` opens a hosted-checkout session; `/xixipay-webhook` receives
the gateway callback. Keep this thin: no gateway or storage details here.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette import status as http_status

from api.dependencies import (
    get_deposit_service,
    get_gateway,
    get_payment_settings_dep,
    get_reconciliation_service,
)
from api.middleware import client_ip_from
from api.utils.ip import is_ip_allowed
from application.dtos.deposits import InitDepositRequest, WebhookOutcome
from application.ports.payment_gateway import PaymentGateway
from application.services.deposit_service import DepositService
from application.services.reconciliation_service import DepositReconciliationService
from core.logging_config import get_logger
from core.response import success_response
from core.settings import PaymentSettings


router = APIRouter(tags=["Deposits"])
logger = get_logger(__name__)


@router.post("/init-xixipay")
async def init_deposit(
    payload: InitDepositRequest,
    service: DepositService = Depends(get_deposit_service),
):
    payment_url = await service.initiate(payload)
    return JSONResponse(content=success_response(payment_url=payment_url).to_content())


@router.post("/xixipay-webhook", response_class=PlainTextResponse)
async def xixipay_webhook(
    request: Request,
    gateway: PaymentGateway = Depends(get_gateway),
    reconciler: DepositReconciliationService = Depends(get_reconciliation_service),
    settings: PaymentSettings = Depends(get_payment_settings_dep),
):
    body = await request.body()
    remote_ip = client_ip_from(request)
    logger.info("webhook_received", provider=gateway.provider, bytes=len(body), remote_ip=remote_ip)

    if not is_ip_allowed(remote_ip, settings.webhook.ip_allowlist):
        logger.warning("webhook_ip_not_allowed", remote_ip=remote_ip)
        return PlainTextResponse(WebhookOutcome.IGNORED.value)

    try:
        event = gateway.parse_webhook(dict(request.headers), body)
        outcome = await reconciler.reconcile(event)
    except Exception as exc:
        # The gateway redelivers on non-2xx
        logger.error("webhook_processing_failed", error=str(exc), error_type=type(exc).__name__, exc_info=True)
        return PlainTextResponse(
            WebhookOutcome.ERROR.value,
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return PlainTextResponse(outcome.value)
