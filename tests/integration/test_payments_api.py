"""Payments over HTTP, including Razorpay checkout with a mock gateway."""

import json

import httpx
import pytest
from libs.common.config import Settings
from services.gateway_service.app.main import app
from services.payments_service.razorpay_client import (
    RazorpayClient,
    get_razorpay_client,
    sign,
)
from tests.conftest import bearer
from tests.factories import BatchFactory, EnrollmentFactory, SportFactory

PAYMENTS = "/api/v1/payments"


async def _enrollment(db, caller):
    sport = SportFactory.create()
    batch = BatchFactory.create(sport_id=sport.id)
    enrollment = EnrollmentFactory.create(
        user_id=caller.user_id, batch_id=batch.id, sport_id=sport.id
    )
    db.add_all([sport, batch, enrollment])
    await db.commit()
    return enrollment


@pytest.fixture
def razorpay():
    def handler(request):
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "order_HTTP1",
                "amount": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            },
        )

    settings = Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        RAZORPAY_KEY_ID="rzp_test_key",
        RAZORPAY_KEY_SECRET="rzp_test_secret",
    )
    rzp = RazorpayClient(settings, transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_razorpay_client] = lambda: rzp
    yield rzp
    app.dependency_overrides.pop(get_razorpay_client, None)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_flow(client, db_session, student, razorpay):
    enrollment = await _enrollment(db_session, student)

    created = await client.post(
        PAYMENTS,
        json={
            "user_id": str(student.user_id),
            "enrollment_id": str(enrollment.id),
            "amount": 1500,
            "method": "razorpay",
        },
        headers=bearer(student),
    )
    assert created.status_code == 201
    payment_id = created.json()["id"]

    order = await client.post(
        f"{PAYMENTS}/{payment_id}/checkout", headers=bearer(student)
    )
    assert order.status_code == 200
    assert order.json()["amount"] == 150000
    assert order.json()["key_id"] == "rzp_test_key"

    verified = await client.post(
        f"{PAYMENTS}/{payment_id}/checkout/verify",
        json={
            "razorpay_order_id": "order_HTTP1",
            "razorpay_payment_id": "pay_HTTP1",
            "razorpay_signature": sign("order_HTTP1", "pay_HTTP1", "rzp_test_secret"),
        },
        headers=bearer(student),
    )
    assert verified.status_code == 200
    assert verified.json()["status"] == "completed"

    mine = await client.get(f"{PAYMENTS}/me", headers=bearer(student))
    assert [p["id"] for p in mine.json()] == [payment_id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_marks_paid_then_refunds(client, db_session, admin, student):
    enrollment = await _enrollment(db_session, student)
    invoice = await client.post(
        f"{PAYMENTS}/invoices",
        json={
            "user_id": str(student.user_id),
            "enrollment_id": str(enrollment.id),
            "amount": 1200,
        },
        headers=bearer(admin),
    )
    assert invoice.status_code == 201
    payment_id = invoice.json()["id"]

    paid = await client.post(
        f"{PAYMENTS}/{payment_id}/mark-paid", json={}, headers=bearer(admin)
    )
    assert paid.status_code == 200
    assert paid.json()["method"] == "cash"

    again = await client.post(
        f"{PAYMENTS}/{payment_id}/mark-paid", json={}, headers=bearer(admin)
    )
    assert again.status_code == 409

    refund = await client.post(
        f"{PAYMENTS}/{payment_id}/refund",
        json={"refund_amount": 200, "refund_reason": "Two classes missed"},
        headers=bearer(admin),
    )
    assert refund.status_code == 200
    assert refund.json()["refunded"] is True

    stats = await client.get(f"{PAYMENTS}/stats", headers=bearer(admin))
    assert stats.json()["total_revenue"] == 1000


@pytest.mark.asyncio
@pytest.mark.integration
async def test_student_cannot_mark_paid(client, db_session, student):
    enrollment = await _enrollment(db_session, student)
    created = await client.post(
        PAYMENTS,
        json={
            "user_id": str(student.user_id),
            "enrollment_id": str(enrollment.id),
            "amount": 1500,
            "method": "upi",
        },
        headers=bearer(student),
    )

    response = await client.post(
        f"{PAYMENTS}/{created.json()['id']}/mark-paid",
        json={},
        headers=bearer(student),
    )
    assert response.status_code == 403
