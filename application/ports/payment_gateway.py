"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from application.dtos.deposits import (
    GatewaySession,
    GatewaySessionRequest,
    WebhookEvent,
)


@runtime_checkable
class PaymentGateway(Protocol):
    """Hosted-checkout gateway.

    create_session raises GatewayInitFailedError when the provider answers
    without a payment URL. parse_webhook returns None for bodies that are
    not a JSON object.
    """

    provider: str

    async def create_session(self, req: GatewaySessionRequest) -> GatewaySession: ...

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> Optional[WebhookEvent]: ...

    async def aclose(self) -> None: ...
