"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from api.middleware import LoggingMiddleware, RequestIDMiddleware
from api.routes import deposits as deposit_routes
from core.config import Settings, get_settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging, get_logger
from core.settings import PaymentSettings, get_payment_settings
from infrastructure.database import create_engine, create_session_factory, create_tables
from infrastructure.external.payments import get_payment_gateway


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database engine and the gateway client; close both on shutdown."""
    settings: Settings = app.state.settings
    payment_settings: PaymentSettings = app.state.payment_settings

    engine = create_engine(settings.database)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    if settings.database.auto_create:
        await create_tables(engine)
        logger.info("database_initialized", message="Database tables created")

    app.state.payment_gateway = get_payment_gateway(payment_settings)
    logger.info(
        "application_started",
        project=settings.PROJECT_NAME,
        environment=settings.ENVIRONMENT,
        gateway=app.state.payment_gateway.provider,
    )

    yield

    try:
        await app.state.payment_gateway.aclose()
    finally:
        await engine.dispose()
    logger.info("application_shutdown", message="Application shutdown")


def create_app(
    settings: Optional[Settings] = None,
    payment_settings: Optional[PaymentSettings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    payment_settings = payment_settings or get_payment_settings()
    configure_logging(settings.DEBUG)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        description="Deposit initiation and gateway webhook reconciliation",
    )
    app.state.settings = settings
    app.state.payment_settings = payment_settings

    # Middleware runs outermost-last-added: CORS, then request id, then logging
    app.add_middleware(
        LoggingMiddleware,
        log_body=settings.LOG_REQUEST_BODY_ENABLE_BY_DEFAULT,
        max_body_bytes=settings.LOG_REQUEST_BODY_MAX_BYTES,
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(deposit_routes.router)

    @app.get("/", tags=["Root"], response_class=PlainTextResponse)
    async def root(request: Request):
        return PlainTextResponse(f"{request.app.state.settings.PROJECT_NAME} running")

    @app.get("/health", tags=["Health"])
    async def health_check():
        return JSONResponse(content={"success": True, "status": "healthy"})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "main:app",
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG,
        log_level=_settings.log_level,
        proxy_headers=True,
        forwarded_allow_ips=_settings.FORWARDED_ALLOW_IPS,
    )
