"""
Deposit DTOs (Pydantic v2) used at application boundaries.

Client-facing payloads keep the camelCase keys the web client sends.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InitDepositRequest(BaseModel):
    """Body of POST /init-xixipay. Presence checks happen in the service so
    that missing fields produce the domain errors, not a schema error."""

    amount: Optional[int] = None
    email: Optional[str] = None
    deposit_id: Optional[str] = Field(default=None, alias="depositId")
    user_id: Optional[str] = Field(default=None, alias="userId")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class GatewaySessionRequest(BaseModel):
    amount: int
    email: str
    reference: str
    callback_url: str
    redirect_url: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class GatewaySession(BaseModel):
    payment_url: str
    reference: str
    provider: str
    raw: Optional[dict[str, Any]] = None


class WebhookEvent(BaseModel):
    """Normalised gateway notification."""

    provider: str
    status: Optional[str] = None
    succeeded: bool = False
    deposit_id: Optional[str] = None
    reference: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class WebhookOutcome(str, Enum):
    """Plaintext acknowledgements understood by the gateway."""

    OK = "ok"
    IGNORED = "ignored"
    NO_DEPOSIT_ID = "no depositId"
    DEPOSIT_NOT_FOUND = "deposit not found"
    ALREADY_PROCESSED = "already processed"
    ERROR = "error"
