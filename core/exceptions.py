"""
Global exception handlers
"""
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status as http_status

from .response import error_response
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException


# Simple clients only check `success`, so validation, conflict and gateway
# failures are answered with 200. Anything missing maps to 404, the rest to 500.
_STATUS_BY_CODE = {
    BusinessCode.PARAM_MISSING: http_status.HTTP_200_OK,
    BusinessCode.PARAM_VALIDATION_ERROR: http_status.HTTP_200_OK,
    BusinessCode.INVALID_AMOUNT: http_status.HTTP_200_OK,

    BusinessCode.BUSINESS_ERROR: http_status.HTTP_200_OK,
    BusinessCode.DEPOSIT_ALREADY_PROCESSED: http_status.HTTP_200_OK,
    BusinessCode.USER_NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    BusinessCode.DEPOSIT_NOT_FOUND: http_status.HTTP_404_NOT_FOUND,

    BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.TRANSACTION_CONFLICT: http_status.HTTP_500_INTERNAL_SERVER_ERROR,

    PaymentCode.PROVIDER_ERROR: http_status.HTTP_200_OK,
    PaymentCode.INIT_FAILED: http_status.HTTP_200_OK,
}


def business_code_to_http_status(code: int) -> int:
    return _STATUS_BY_CODE.get(code, http_status.HTTP_200_OK)


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", object()), "request_id", None) or str(uuid.uuid4())


def register_exception_handlers(app: FastAPI):
    """
    Register the global exception handlers.

    Args:
        app: FastAPI application
    """
    logger = get_logger(__name__)

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        request_id = _request_id(request)
        raw = (exc.details or {}).get("raw")
        response = error_response(exc.message, exc.code, raw=raw, request_id=request_id)
        status_code = business_code_to_http_status(exc.code)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "business_exception",
            error_type=exc.error_type,
            code=int(exc.code),
            error=exc.message,
            details={k: v for k, v in (exc.details or {}).items() if k != "raw"},
        )
        return JSONResponse(status_code=status_code, content=response.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are reported like any other validation failure."""
        request_id = _request_id(request)
        errors = exc.errors()
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])
        logger.warning("request_validation_failed", field=field, reason=first_error.get("msg"))
        response = error_response(
            f"Invalid request: {field or 'body'}",
            BusinessCode.PARAM_VALIDATION_ERROR,
            request_id=request_id,
        )
        return JSONResponse(status_code=http_status.HTTP_200_OK, content=response.to_content())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Anything unexpected: log the traceback, return a generic message."""
        request_id = _request_id(request)
        logger.error(
            "unhandled_exception",
            request_id=request_id,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        response = error_response(
            "Internal server error",
            BusinessCode.SYSTEM_ERROR,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.to_content(),
        )
