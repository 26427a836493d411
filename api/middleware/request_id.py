"""
Request ID middleware.

Reuses an incoming X-Request-ID (the gateway and proxies may set one) or
mints a new one, and binds it to structlog's contextvars so every log line
of the request carries it.
"""
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

import structlog


def client_ip_from(request: Request) -> Optional[str]:
    """The socket peer address.

    Forwarded headers are not read here: behind a proxy, uvicorn's
    proxy-headers support rewrites the peer for trusted proxies only.
    """
    return request.client.host if request.client else None


class RequestIDMiddleware(BaseHTTPMiddleware):
    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        client_ip = client_ip_from(request)

        request.state.request_id = request_id
        request.state.client_ip = client_ip

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            client_ip=client_ip,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers[self.HEADER_NAME] = request_id
        return response
