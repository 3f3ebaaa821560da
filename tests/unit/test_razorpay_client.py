"""Unit tests for the Razorpay client."""

import json

import httpx
import pytest
from libs.common.config import Settings
from services.payments_service.razorpay_client import (
    RazorpayClient,
    RazorpayError,
    sign,
    to_paise,
)


def _client(handler=None, **overrides) -> RazorpayClient:
    values = {
        "DATABASE_URL": "sqlite+aiosqlite://",
        "RAZORPAY_KEY_ID": "rzp_test_key",
        "RAZORPAY_KEY_SECRET": "rzp_test_secret",
    }
    values.update(overrides)
    transport = httpx.MockTransport(handler) if handler else None
    return RazorpayClient(Settings(**values), transport=transport)


@pytest.mark.unit
@pytest.mark.parametrize(
    "rupees,paise", [(1500, 150000), (999.99, 99999), (0.1, 10), (12.34, 1234)]
)
def test_to_paise(rupees, paise):
    assert to_paise(rupees) == paise


@pytest.mark.unit
def test_signature_verification():
    client = _client()
    good = sign("order_1", "pay_1", "rzp_test_secret")

    assert client.verify_signature("order_1", "pay_1", good) is True
    assert client.verify_signature("order_1", "pay_2", good) is False
    assert client.verify_signature("order_1", "pay_1", good.upper()) is False


@pytest.mark.unit
def test_signature_needs_secret():
    with pytest.raises(RazorpayError):
        _client(RAZORPAY_KEY_SECRET="").verify_signature("o", "p", "s")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_order_posts_paise_with_basic_auth():
    seen = []

    def handler(request):
        seen.append(request)
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "order_ABC",
                "amount": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            },
        )

    order = await _client(handler).create_order(
        1250.5, receipt="pay-ref", notes={"enrollment_id": "e1"}
    )

    assert order.id == "order_ABC"
    assert order.amount == 125050
    assert order.currency == "INR"
    request = seen[0]
    assert str(request.url) == "https://api.razorpay.com/v1/orders"
    assert request.headers["Authorization"].startswith("Basic ")
    assert json.loads(request.content)["notes"] == {"enrollment_id": "e1"}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_api_error_carries_description():
    def handler(request):
        return httpx.Response(
            400,
            json={"error": {"code": "BAD_REQUEST_ERROR", "description": "Bad amount"}},
        )

    with pytest.raises(RazorpayError) as exc_info:
        await _client(handler).create_order(10, receipt="r")

    assert exc_info.value.message == "Bad amount"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_keys_fail_before_any_request():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(RazorpayError):
        await _client(handler, RAZORPAY_KEY_ID="").create_order(10, receipt="r")


@pytest.mark.unit
def test_non_ascii_signature_is_rejected():
    assert _client().verify_signature("order_1", "pay_1", "é" * 64) is False


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("status_code", [200, 502])
async def test_non_json_body_raises_api_error(status_code):
    def handler(request):
        return httpx.Response(status_code, text="<html>Bad Gateway</html>")

    with pytest.raises(RazorpayError) as exc_info:
        await _client(handler).create_order(10, receipt="r")

    assert exc_info.value.status_code == status_code
