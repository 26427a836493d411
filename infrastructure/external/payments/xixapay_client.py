"""
Xixapay hosted-checkout adapter.

Session creation posts to the payment-initiate endpoint authenticated with
the static `x-api-key` / `x-business-id` pair and expects
`{"status": true, "data": {"payment_url": ...}}` back. Webhooks are plain
JSON with a `status` field and the `metadata` we sent at initiation.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from application.dtos.deposits import GatewaySession, GatewaySessionRequest, WebhookEvent
from core.settings import PaymentSettings
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import GatewayInitFailedError


class XixapayClient(BasePaymentClient):
    provider = "xixapay"

    def __init__(self, settings: PaymentSettings, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeouts=settings.timeouts.model_dump(), transport=transport)
        cfg = settings.xixapay
        if not cfg.api_key:
            raise RuntimeError("XIXAPAY__API_KEY not configured")
        if not cfg.business_id:
            raise RuntimeError("XIXAPAY__BUSINESS_ID not configured")
        self._cfg = cfg

    @property
    def initiate_url(self) -> str:
        return self._cfg.base_url.rstrip("/") + "/" + self._cfg.initiate_path.lstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self._cfg.api_key or "",
            "x-business-id": self._cfg.business_id or "",
        }

    async def create_session(self, req: GatewaySessionRequest) -> GatewaySession:  # type: ignore[override]
        payload = {
            "amount": req.amount,
            "email": req.email,
            "reference": req.reference,
            "callback_url": req.callback_url,
            "redirect_url": req.redirect_url,
            "metadata": req.metadata,
        }
        status_code, data = await self._post_json(self.initiate_url, headers=self._headers(), payload=payload)

        payment_url = None
        if isinstance(data, dict) and data.get("status"):
            inner = data.get("data")
            if isinstance(inner, dict):
                payment_url = inner.get("payment_url")
        if not payment_url:
            self._log("gateway_session_failed", reference=req.reference, status_code=status_code)
            raise GatewayInitFailedError(provider=self.provider, raw=data)

        return GatewaySession(
            payment_url=str(payment_url),
            reference=req.reference,
            provider=self.provider,
            raw=data,
        )

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> Optional[WebhookEvent]:  # type: ignore[override]
        event = self._decode_json_object(body)
        if event is None:
            return None

        metadata = event.get("metadata")
        deposit_id = metadata.get("depositId") if isinstance(metadata, dict) else None
        status = event.get("status")
        return WebhookEvent(
            provider=self.provider,
            status=status if isinstance(status, str) else None,
            succeeded=self._map_status(status) == "approved",
            deposit_id=str(deposit_id) if deposit_id else None,
            reference=event.get("reference") if isinstance(event.get("reference"), str) else None,
            data=event,
        )
