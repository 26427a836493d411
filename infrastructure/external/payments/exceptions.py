"""
Exceptions for payment providers mapped to unified BusinessException variants.
"""
from __future__ import annotations

from typing import Any, Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class PaymentProviderError(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        provider: str,
        code: int = PaymentCode.PROVIDER_ERROR,
        error_type: str = "PaymentProviderError",
        details: Optional[dict] = None,
    ):
        full_details = {"provider": provider}
        if details:
            full_details.update(details)
        super().__init__(
            code=code,
            message=message,
            error_type=error_type,
            details=full_details,
        )


class GatewayInitFailedError(PaymentProviderError):
    """The gateway answered but did not open a payment session.

    The raw response travels in details["raw"] so the client can show it.
    """

    def __init__(self, *, provider: str, raw: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{provider.capitalize()} init failed",
            provider=provider,
            code=PaymentCode.INIT_FAILED,
            error_type="GatewayInitFailed",
            details={"raw": raw},
        )
