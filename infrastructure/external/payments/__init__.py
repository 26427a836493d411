"""
Factory for payment gateway clients.
"""
from __future__ import annotations

from typing import Optional

from core.settings import PaymentSettings
from application.ports.payment_gateway import PaymentGateway


def get_payment_gateway(settings: PaymentSettings, provider: Optional[str] = None) -> PaymentGateway:
    name = (provider or "xixapay").lower()
    if name in {"xixapay", "xixipay", "xixi"}:
        from .xixapay_client import XixapayClient
        return XixapayClient(settings)
    raise ValueError(f"Unsupported payment provider: {name}")
