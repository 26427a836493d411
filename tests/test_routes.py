import json

import httpx
import pytest

from domain.deposit import DepositStatus

from conftest import PAYMENT_URL


INIT_BODY = {"amount": 500, "email": "payer@example.com", "depositId": "dep_1", "userId": "user_1"}


def _webhook_body(deposit_id="dep_1", status="success") -> bytes:
    return json.dumps({"status": status, "metadata": {"depositId": deposit_id}}).encode()


@pytest.mark.asyncio
async def test_root_and_health(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Chiearnhub backend running"

    resp = await client.get("/health")
    assert resp.json() == {"success": True, "status": "healthy"}
    assert resp.headers["X-Request-ID"]
    assert "X-Process-Time" in resp.headers


@pytest.mark.asyncio
async def test_init_returns_payment_url(client, fetch_deposit, gateway_transport):
    resp = await client.post("/init-xixipay", json=INIT_BODY, headers={"X-Request-ID": "req-123"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "paymentUrl": PAYMENT_URL}
    assert resp.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in resp.headers
    assert len(gateway_transport.calls) == 1
    row = await fetch_deposit("dep_1")
    assert row.status == DepositStatus.PENDING.value


@pytest.mark.asyncio
async def test_init_rejects_small_amount(client, fetch_deposit):
    resp = await client.post("/init-xixipay", json={**INIT_BODY, "amount": 50})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Minimum deposit is ₦100"
    assert await fetch_deposit("dep_1") is None


@pytest.mark.asyncio
async def test_init_reports_missing_fields(client):
    resp = await client.post("/init-xixipay", json={"amount": 500, "email": "payer@example.com"})

    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is False
    assert body["message"] == "Missing parameters"


@pytest.mark.asyncio
async def test_init_malformed_amount_is_a_validation_error(client):
    resp = await client.post("/init-xixipay", json={**INIT_BODY, "amount": "lots"})

    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is False
    assert body["message"].startswith("Invalid request")


@pytest.mark.asyncio
async def test_init_gateway_rejection_returns_raw(app, client, payment_settings, fetch_deposit):
    from infrastructure.external.payments.xixapay_client import XixapayClient

    raw = {"status": False, "message": "invalid business"}
    app.state.payment_gateway = XixapayClient(
        payment_settings, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=raw))
    )

    resp = await client.post("/init-xixipay", json=INIT_BODY)

    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is False
    assert body["message"] == "Xixapay init failed"
    assert body["raw"] == raw
    assert (await fetch_deposit("dep_1")).status == DepositStatus.INITIATED.value


@pytest.mark.asyncio
async def test_init_transport_error_is_internal(app, client, payment_settings):
    from infrastructure.external.payments.xixapay_client import XixapayClient

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    app.state.payment_gateway = XixapayClient(payment_settings, transport=httpx.MockTransport(unreachable))

    resp = await client.post("/init-xixipay", json=INIT_BODY)

    assert resp.status_code == 500
    assert resp.json()["message"] == "Internal server error"


@pytest.mark.asyncio
async def test_webhook_full_flow_credits_once(client, seed_user, fetch_user, fetch_deposit):
    await seed_user("user_1", balance=1000)
    await client.post("/init-xixipay", json=INIT_BODY)

    first = await client.post("/xixipay-webhook", content=_webhook_body(), headers={"Content-Type": "application/json"})
    second = await client.post("/xixipay-webhook", content=_webhook_body(), headers={"Content-Type": "application/json"})

    assert (first.status_code, first.text) == (200, "ok")
    assert (second.status_code, second.text) == (200, "already processed")
    assert (await fetch_user("user_1")).balance == 1500
    assert (await fetch_deposit("dep_1")).status == DepositStatus.APPROVED.value


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, expected",
    [
        (b"not json", "ignored"),
        (_webhook_body(status="pending"), "ignored"),
        (json.dumps({"status": "success"}).encode(), "no depositId"),
        (_webhook_body(deposit_id="dep_missing"), "deposit not found"),
    ],
)
async def test_webhook_plaintext_outcomes(client, body, expected):
    resp = await client.post("/xixipay-webhook", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 200
    assert resp.text == expected


@pytest.mark.asyncio
async def test_webhook_missing_user_answers_error(client, fetch_deposit):
    await client.post("/init-xixipay", json={**INIT_BODY, "userId": "ghost"})

    resp = await client.post("/xixipay-webhook", content=_webhook_body())

    assert resp.status_code == 500
    assert resp.text == "error"
    assert (await fetch_deposit("dep_1")).status == DepositStatus.PENDING.value


@pytest.mark.asyncio
async def test_webhook_allowlist_checks_the_peer_address(app, client, seed_user, fetch_user):
    await seed_user("user_1", balance=0)
    await client.post("/init-xixipay", json=INIT_BODY)
    app.state.payment_settings.webhook.ip_allowlist = ["10.0.0.0/8"]

    # The test client connects from 127.0.0.1; a forwarded header must not change that
    forged = await client.post(
        "/xixipay-webhook", content=_webhook_body(), headers={"X-Forwarded-For": "10.9.9.9"}
    )
    assert forged.text == "ignored"
    assert (await fetch_user("user_1")).balance == 0

    transport = httpx.ASGITransport(app=app, client=("10.1.2.3", 40000))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as gateway_peer:
        allowed = await gateway_peer.post("/xixipay-webhook", content=_webhook_body())
    assert allowed.text == "ok"
    assert (await fetch_user("user_1")).balance == 500
