import json

import httpx
import pytest

from application.dtos.deposits import GatewaySessionRequest
from core.settings import PaymentSettings, XixapaySettings
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.exceptions import GatewayInitFailedError
from infrastructure.external.payments.xixapay_client import XixapayClient


def _session_request() -> GatewaySessionRequest:
    return GatewaySessionRequest(
        amount=500,
        email="payer@example.com",
        reference="CH_1714564800000_dep_1",
        callback_url="https://backend.test/xixipay-webhook",
        redirect_url="https://frontend.test/deposit-success.html",
        metadata={"depositId": "dep_1"},
    )


def _client(payment_settings, handler) -> XixapayClient:
    return XixapayClient(payment_settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_create_session_sends_headers_and_body(payment_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": True, "data": {"payment_url": "https://pay.test/abc"}})

    client = _client(payment_settings, handler)
    try:
        session = await client.create_session(_session_request())
    finally:
        await client.aclose()

    assert session.payment_url == "https://pay.test/abc"
    assert session.provider == "xixapay"
    request = seen[0]
    assert str(request.url) == "https://api.xixapay.test/api/v1/payment/initiate"
    assert request.headers["x-api-key"] == "test-api-key"
    assert request.headers["x-business-id"] == "biz_test"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {
        "amount": 500,
        "email": "payer@example.com",
        "reference": "CH_1714564800000_dep_1",
        "callback_url": "https://backend.test/xixipay-webhook",
        "redirect_url": "https://frontend.test/deposit-success.html",
        "metadata": {"depositId": "dep_1"},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, body",
    [
        (200, {"status": False, "message": "invalid key"}),
        (200, {"status": True, "data": {}}),
        (401, {"message": "unauthorized"}),
    ],
)
async def test_create_session_without_url_fails_with_raw(payment_settings, status_code, body):
    client = _client(payment_settings, lambda request: httpx.Response(status_code, json=body))
    try:
        with pytest.raises(GatewayInitFailedError) as exc_info:
            await client.create_session(_session_request())
    finally:
        await client.aclose()

    assert exc_info.value.message == "Xixapay init failed"
    assert exc_info.value.details["raw"] == body


@pytest.mark.asyncio
async def test_non_json_answer_is_wrapped(payment_settings):
    client = _client(payment_settings, lambda request: httpx.Response(502, text="Bad Gateway"))
    try:
        with pytest.raises(GatewayInitFailedError) as exc_info:
            await client.create_session(_session_request())
    finally:
        await client.aclose()

    assert exc_info.value.details["raw"] == {"body": "Bad Gateway"}


def test_parse_webhook_success(payment_settings):
    client = XixapayClient(payment_settings)
    body = json.dumps({"status": "success", "reference": "CH_1_dep_1", "metadata": {"depositId": "dep_1"}}).encode()

    event = client.parse_webhook({}, body)

    assert event.succeeded
    assert event.deposit_id == "dep_1"
    assert event.reference == "CH_1_dep_1"
    assert event.status == "success"


@pytest.mark.parametrize(
    "body, succeeded, deposit_id",
    [
        ({"status": "pending", "metadata": {"depositId": "dep_1"}}, False, "dep_1"),
        ({"status": "failed"}, False, None),
        ({"status": "success"}, True, None),
        ({"status": "success", "metadata": "dep_1"}, True, None),
        ({"status": True}, False, None),
    ],
)
def test_parse_webhook_variants(payment_settings, body, succeeded, deposit_id):
    event = XixapayClient(payment_settings).parse_webhook({}, json.dumps(body).encode())
    assert event.succeeded is succeeded
    assert event.deposit_id == deposit_id


@pytest.mark.parametrize("body", [b"", b"not json", b"[1, 2]", b'"success"'])
def test_parse_webhook_rejects_non_objects(payment_settings, body):
    assert XixapayClient(payment_settings).parse_webhook({}, body) is None


def test_missing_credentials_refuse_to_build():
    settings = PaymentSettings(_env_file=None, xixapay=XixapaySettings(api_key=None, business_id="biz"))
    with pytest.raises(RuntimeError):
        XixapayClient(settings)


def test_factory_accepts_provider_aliases(payment_settings):
    assert isinstance(get_payment_gateway(payment_settings), XixapayClient)
    assert isinstance(get_payment_gateway(payment_settings, "xixipay"), XixapayClient)
    with pytest.raises(ValueError):
        get_payment_gateway(payment_settings, "paypal")
