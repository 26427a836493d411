"""
Response envelope shared by the JSON endpoints.

Clients only look at `success` and then either `paymentUrl` or `message`,
so failures are kept flat rather than nested under an error object.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.codes import BusinessCode


class ApiResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    code: Optional[int] = None
    payment_url: Optional[str] = Field(default=None, serialization_alias="paymentUrl")
    raw: Optional[Any] = None
    request_id: Optional[str] = Field(default=None, serialization_alias="requestId")

    model_config = ConfigDict(populate_by_name=True)

    def to_content(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def success_response(message: Optional[str] = None, **data: Any) -> ApiResponse:
    return ApiResponse(success=True, message=message, **data)


def error_response(
    message: str,
    code: int = BusinessCode.BUSINESS_ERROR,
    *,
    raw: Any = None,
    request_id: Optional[str] = None,
) -> ApiResponse:
    return ApiResponse(
        success=False,
        message=message,
        code=int(code),
        raw=raw,
        request_id=request_id,
    )
