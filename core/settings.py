"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so gateway credentials are only
loaded by the code paths that talk to the gateway.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentTimeouts(BaseModel):
    connect: float = 5.0
    read: float = 30.0
    write: float = 30.0
    total: float = 60.0


class WebhookSettings(BaseModel):
    ip_allowlist: list[str] | None = None  # Optional IPs/CIDRs allowed to post webhooks


class XixapaySettings(BaseModel):
    api_key: Optional[str] = None
    business_id: Optional[str] = None
    base_url: str = "https://api.xixapay.com"
    initiate_path: str = "/api/v1/payment/initiate"
    callback_url: str = "https://chiearnhub-backend.onrender.com/xixipay-webhook"
    redirect_url: str = "https://chiearnhub.vercel.app/deposit-success.html"


class DepositSettings(BaseModel):
    min_amount: int = 100  # minor units (kobo)
    method: str = "Xixapay"
    reference_prefix: str = "CH"
    transaction_max_attempts: int = 5


class PaymentSettings(BaseSettings):
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    xixapay: XixapaySettings = Field(default_factory=XixapaySettings)
    deposit: DepositSettings = Field(default_factory=DepositSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


@lru_cache
def get_payment_settings(env_file: Optional[str] = ".env") -> PaymentSettings:
    return PaymentSettings(_env_file=env_file)
