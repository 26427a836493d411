"""Business exceptions raised by the domain and infrastructure layers.

The core layer only maps them to HTTP responses; the domain never imports
from core.
"""
from __future__ import annotations

from typing import Optional, Sequence
from shared.codes import BusinessCode


class BusinessException(Exception):
    """Base class for every expected, user-facing failure."""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class InvalidAmountException(BusinessException):
    def __init__(self, min_amount: int, amount: Optional[int] = None):
        super().__init__(
            code=BusinessCode.INVALID_AMOUNT,
            message=f"Minimum deposit is ₦{min_amount}",
            error_type="InvalidAmount",
            details={"amount": amount, "min_amount": min_amount},
            field="amount",
        )


class MissingFieldsException(BusinessException):
    def __init__(self, fields: Sequence[str]):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message="Missing parameters",
            error_type="MissingFields",
            details={"fields": list(fields)},
            field=fields[0] if fields else None,
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class DepositNotFoundException(BusinessException):
    def __init__(self, deposit_id: str):
        super().__init__(
            code=BusinessCode.DEPOSIT_NOT_FOUND,
            message="Deposit not found",
            error_type="DepositNotFound",
            details={"deposit_id": deposit_id},
        )


class UserNotFoundException(BusinessException):
    def __init__(self, user_id: Optional[str] = None):
        details = {"user_id": user_id} if user_id else None
        super().__init__(
            code=BusinessCode.USER_NOT_FOUND,
            message="User not found",
            error_type="UserNotFound",
            details=details,
        )


class DepositAlreadyProcessedException(BusinessException):
    def __init__(self, deposit_id: str):
        super().__init__(
            code=BusinessCode.DEPOSIT_ALREADY_PROCESSED,
            message="Deposit already processed",
            error_type="DepositAlreadyProcessed",
            details={"deposit_id": deposit_id},
        )


class BalanceConflictException(BusinessException):
    """Another writer changed the user's balance between read and write."""

    def __init__(self, user_id: str, expected_version: int):
        super().__init__(
            code=BusinessCode.TRANSACTION_CONFLICT,
            message="Concurrent balance update",
            error_type="BalanceConflict",
            details={"user_id": user_id, "expected_version": expected_version},
        )
