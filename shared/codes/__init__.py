"""
Shared business codes used across layers (Domain/Core/API).

This package exposes BusinessCode at `shared.codes` and keeps
payment-specific codes under `shared.codes.payment_codes`.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """Unified business status codes (single source of truth)."""

    # Parameter errors (1xxxx)
    PARAM_MISSING = 10001
    PARAM_VALIDATION_ERROR = 10003
    INVALID_AMOUNT = 10004

    # Business errors (2xxxx)
    BUSINESS_ERROR = 20000
    USER_NOT_FOUND = 20001
    DEPOSIT_NOT_FOUND = 20006
    DEPOSIT_ALREADY_PROCESSED = 20007

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    TRANSACTION_CONFLICT = 40004


__all__ = ["BusinessCode"]
