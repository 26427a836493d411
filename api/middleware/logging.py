"""
Request/response logging middleware with timing
"""
import time
import json
from typing import Any, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.logging_config import get_logger


logger = get_logger(__name__)


MASK = "***"


def mask_sensitive(data: Any, sensitive: frozenset) -> Any:
    """Recursively replace values of sensitive keys."""
    if isinstance(data, dict):
        return {
            k: MASK if str(k).lower() in sensitive else mask_sensitive(v, sensitive)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, sensitive) for item in data]
    return data


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs request start and completion (status, duration) and, when enabled,
    a truncated JSON body with sensitive values masked.
    """

    SKIP_PATHS = {"/", "/health", "/docs", "/redoc", "/openapi.json"}

    SENSITIVE_FIELDS = frozenset({
        "email", "api_key", "x-api-key", "secret", "token", "access_token", "authorization",
    })

    def __init__(self, app: ASGIApp, *, log_body: bool = True, max_body_bytes: int = 2048):
        super().__init__(app)
        self.log_body = log_body
        self.max_body_bytes = max_body_bytes

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        if request.url.path in self.SKIP_PATHS:
            response = await call_next(request)
            response.headers["X-Process-Time"] = f"{time.time() - start_time:.3f}"
            return response

        request_info = await self._get_request_info(request)
        logger.info("request_started", **request_info)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=time.time() - start_time,
                error=str(exc),
                error_type=type(exc).__name__,
                **request_info,
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        self._log_response(response.status_code, duration, request_info)
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response

    async def _get_request_info(self, request: Request) -> dict:
        info: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
        }
        if request.query_params:
            info["query_params"] = dict(request.query_params)
        if request.method in ("POST", "PUT", "PATCH") and self._should_log_body(request):
            body = await self._extract_body(request)
            if body is not None:
                info["body"] = body
        user_agent = request.headers.get("User-Agent")
        if user_agent:
            info["user_agent"] = user_agent
        return info

    def _should_log_body(self, request: Request) -> bool:
        # X-Log-Body: true/false overrides the configured default
        header = (request.headers.get("X-Log-Body") or "").lower()
        if header in {"true", "1", "yes"}:
            return True
        if header in {"false", "0", "no"}:
            return False
        return self.log_body

    async def _extract_body(self, request: Request) -> Optional[Any]:
        content_type = request.headers.get("content-type", "").lower()
        if "application/json" not in content_type:
            return None
        body = await request.body()
        if not body:
            return None
        snippet = body[: self.max_body_bytes]
        try:
            parsed = json.loads(snippet.decode("utf-8", errors="ignore"))
        except ValueError:
            # truncated or malformed: only log its size
            return {"truncated": len(body) > self.max_body_bytes, "bytes": len(body)}
        return mask_sensitive(parsed, self.SENSITIVE_FIELDS)

    def _log_response(self, status_code: int, duration: float, request_info: dict) -> None:
        log_data = {"status_code": status_code, "duration": duration, **request_info}
        if status_code < 400:
            logger.info("request_completed", **log_data)
        elif status_code < 500:
            logger.warning("request_client_error", **log_data)
        else:
            logger.error("request_server_error", **log_data)
