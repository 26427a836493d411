"""
Base payment client implementing shared concerns: http, logging, status mapping.

Concrete providers subclass and implement provider-specific logic. Calls are
never retried here: a failed initiation is resubmitted by the client and a
failed callback is redelivered by the gateway.
"""
from __future__ import annotations

import json
from typing import Any, Optional
from contextlib import asynccontextmanager

import httpx

from core.logging_config import get_logger
from application.dtos.deposits import GatewaySession, GatewaySessionRequest, WebhookEvent
from application.ports.payment_gateway import PaymentGateway
from shared.codes.payment_codes import PROVIDER_STATUS_TO_INTERNAL


logger = get_logger(__name__)


class BasePaymentClient(PaymentGateway):
    provider: str = "base"

    def __init__(
        self,
        *,
        timeouts: Optional[dict[str, float]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeouts_cfg = timeouts or {"connect": 5.0, "read": 30.0, "write": 30.0, "total": 60.0}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeouts, transport=self._transport)
        try:
            yield self._client
        finally:
            # Keep open for reuse; explicit aclose() will close.
            ...

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def create_session(self, req: GatewaySessionRequest) -> GatewaySession:  # type: ignore[override]
        raise NotImplementedError

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> Optional[WebhookEvent]:  # type: ignore[override]
        raise NotImplementedError

    # Helpers
    async def _post_json(self, url: str, *, headers: dict[str, str], payload: dict[str, Any]) -> tuple[int, Any]:
        """POST a JSON body; returns (status_code, decoded body or raw text)."""
        async with self.client() as http:
            resp = await http.post(url, headers=headers, json=payload)
        try:
            body: Any = resp.json()
        except ValueError:
            body = {"body": resp.text}
        self._log("gateway_http_response", url=url, status_code=resp.status_code)
        return resp.status_code, body

    @staticmethod
    def _decode_json_object(body: bytes) -> Optional[dict[str, Any]]:
        if not body:
            return None
        try:
            decoded = json.loads(body)
        except (ValueError, UnicodeDecodeError):
            return None
        return decoded if isinstance(decoded, dict) else None

    def _map_status(self, provider_status: Any) -> Optional[str]:
        if not isinstance(provider_status, str):
            return None
        mapping = PROVIDER_STATUS_TO_INTERNAL.get(self.provider, {})
        return mapping.get(provider_status)

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
