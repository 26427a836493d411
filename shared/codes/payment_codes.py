"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    INIT_FAILED = 60005


# Provider webhook status -> internal deposit status.
# Anything not listed here is treated as a non-terminal event and ignored.
PROVIDER_STATUS_TO_INTERNAL = {
    "xixapay": {
        "success": "approved",
    },
}
