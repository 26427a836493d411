"""Pytest bootstrap configuration.

Environment is set before collection so importing `main` never needs a
real database or gateway credentials. Each test gets its own SQLite file.
"""
import os
from typing import Optional

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///./test-bootstrap.db")
os.environ.setdefault("XIXAPAY__API_KEY", "test-api-key")
os.environ.setdefault("XIXAPAY__BUSINESS_ID", "biz_test")

import httpx
import pytest
import pytest_asyncio

from application.dtos.deposits import GatewaySession, GatewaySessionRequest, WebhookEvent
from core.config import DatabaseSettings, Settings
from core.settings import DepositSettings, PaymentSettings, XixapaySettings
from infrastructure.database import create_engine, create_session_factory, create_tables
from infrastructure.external.payments.exceptions import GatewayInitFailedError
from infrastructure.models import DepositModel, UserModel
from infrastructure.unit_of_work import unit_of_work_factory


PAYMENT_URL = "https://checkout.xixapay.test/pay/abc123"


class StubGateway:
    """In-memory PaymentGateway; records every session request."""

    provider = "stub"

    def __init__(self, payment_url: Optional[str] = PAYMENT_URL, raw: Optional[dict] = None):
        self.payment_url = payment_url
        self.raw = raw if raw is not None else {"status": False, "message": "declined"}
        self.requests: list[GatewaySessionRequest] = []
        self.before_answer = None
        self.closed = False

    async def create_session(self, req: GatewaySessionRequest) -> GatewaySession:
        self.requests.append(req)
        if self.before_answer is not None:
            await self.before_answer(req)
        if not self.payment_url:
            raise GatewayInitFailedError(provider=self.provider, raw=self.raw)
        return GatewaySession(payment_url=self.payment_url, reference=req.reference, provider=self.provider)

    def parse_webhook(self, headers: dict, body: bytes) -> Optional[WebhookEvent]:
        return None

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'deposits.db'}"),
    )


@pytest.fixture
def payment_settings() -> PaymentSettings:
    return PaymentSettings(
        _env_file=None,
        xixapay=XixapaySettings(
            api_key="test-api-key",
            business_id="biz_test",
            base_url="https://api.xixapay.test",
            callback_url="https://backend.test/xixipay-webhook",
            redirect_url="https://frontend.test/deposit-success.html",
        ),
        deposit=DepositSettings(transaction_max_attempts=10),
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine(settings.database)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory):
    return unit_of_work_factory(session_factory)


@pytest.fixture
def seed_user(session_factory):
    async def _seed(user_id: str = "user_1", balance: Optional[int] = None) -> None:
        async with session_factory() as session:
            session.add(UserModel(id=user_id, balance=balance, version=0))
            await session.commit()

    return _seed


@pytest.fixture
def fetch_user(session_factory):
    async def _fetch(user_id: str = "user_1") -> Optional[UserModel]:
        async with session_factory() as session:
            return await session.get(UserModel, user_id)

    return _fetch


@pytest.fixture
def fetch_deposit(session_factory):
    async def _fetch(deposit_id: str) -> Optional[DepositModel]:
        async with session_factory() as session:
            return await session.get(DepositModel, deposit_id)

    return _fetch


@pytest.fixture
def gateway_transport():
    """MockTransport answering the initiate call with a payment URL."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"status": True, "data": {"payment_url": PAYMENT_URL}})

    transport = httpx.MockTransport(handler)
    transport.calls = calls  # type: ignore[attr-defined]
    return transport


@pytest.fixture
def app(settings, payment_settings, session_factory, gateway_transport):
    """Application wired to the per-test database; lifespan is not run."""
    from main import create_app
    from infrastructure.external.payments.xixapay_client import XixapayClient

    application = create_app(settings, payment_settings)
    application.state.session_factory = session_factory
    application.state.payment_gateway = XixapayClient(payment_settings, transport=gateway_transport)
    return application


@pytest_asyncio.fixture
async def client(app):
    # raise_app_exceptions=False: unhandled errors still reach the client as the 500 response
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    await app.state.payment_gateway.aclose()
