"""Unit tests for payment_ops.

Covers the completion path and its side effects, refunds, invoices,
statistics and the Razorpay checkout round trip (with a mock transport).
"""

import json
import uuid

import httpx
import pytest
from libs.common.config import Settings
from libs.common.errors import (
    Conflict,
    Forbidden,
    InvalidTransition,
    NotFound,
    UpstreamFailure,
)
from services.academy_service.models import Enrollment
from services.academy_service.models import PaymentStatus as EnrollmentPaymentStatus
from services.members_service.models import AuditLog, Profile, SubscriptionStatus
from services.payments_service.models import Payment, PaymentStatus
from services.payments_service.razorpay_client import RazorpayClient, sign
from services.payments_service.services.payment_ops import (
    create_checkout_order,
    create_payment,
    delete_payment,
    generate_bulk_invoices,
    generate_invoice,
    get_payment_details,
    get_payment_stats,
    list_payments_for_user,
    mark_as_paid,
    process_refund,
    set_payment_completed,
    update_payment_status,
    verify_checkout,
)
from sqlalchemy import func, select
from tests.conftest import create_member
from tests.factories import (
    BatchFactory,
    EnrollmentFactory,
    PaymentFactory,
    SportFactory,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _enroll(db, caller):
    sport = SportFactory.create()
    db.add(sport)
    batch = BatchFactory.create(sport_id=sport.id, name="Evening Seniors")
    db.add(batch)
    enrollment = EnrollmentFactory.create(
        user_id=caller.user_id, batch_id=batch.id, sport_id=sport.id
    )
    db.add(enrollment)
    await db.commit()
    return enrollment


async def _payment(db, caller, **overrides):
    enrollment = await _enroll(db, caller)
    payment = PaymentFactory.create(
        user_id=caller.user_id, enrollment_id=enrollment.id, **overrides
    )
    db.add(payment)
    await db.commit()
    return payment


def _razorpay(handler) -> RazorpayClient:
    settings = Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        RAZORPAY_KEY_ID="rzp_test_key",
        RAZORPAY_KEY_SECRET="rzp_test_secret",
    )
    return RazorpayClient(settings, transport=httpx.MockTransport(handler))


def _order_handler(captured: list):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        captured.append(body)
        return httpx.Response(
            200,
            json={
                "id": "order_TEST123",
                "amount": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            },
        )

    return handler


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_student_creates_payment_for_own_enrollment(db_session, student):
    enrollment = await _enroll(db_session, student)

    payment = await create_payment(
        db_session,
        student,
        user_id=student.user_id,
        enrollment_id=enrollment.id,
        amount=1500.0,
        method="razorpay",
    )

    assert payment.status == PaymentStatus.PENDING
    assert payment.refunded is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_payment_for_someone_elses_enrollment_is_forbidden(
    db_session, student
):
    _, _, other = await create_member(db_session)
    enrollment = await _enroll(db_session, other)

    with pytest.raises(Forbidden):
        await create_payment(
            db_session,
            student,
            user_id=student.user_id,
            enrollment_id=enrollment.id,
            amount=1500.0,
            method="razorpay",
        )
    with pytest.raises(Forbidden):
        await create_payment(
            db_session,
            student,
            user_id=other.user_id,
            enrollment_id=enrollment.id,
            amount=1500.0,
            method="razorpay",
        )


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completion_marks_enrollment_paid_and_activates_subscription(
    db_session, student
):
    payment = await _payment(db_session, student)

    completed = await set_payment_completed(
        db_session, student, payment_id=payment.id, transaction_id="pay_001"
    )

    assert completed.status == PaymentStatus.COMPLETED
    assert completed.transaction_id == "pay_001"
    assert completed.receipt_number.startswith("REC-")
    assert completed.payment_date is not None

    enrollment = await db_session.get(Enrollment, payment.enrollment_id)
    await db_session.refresh(enrollment)
    assert enrollment.payment_status == EnrollmentPaymentStatus.PAID

    profile = await db_session.get(Profile, student.profile_id)
    await db_session.refresh(profile)
    assert profile.subscription_status == SubscriptionStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_completion_is_rejected(db_session, student):
    payment = await _payment(db_session, student)
    await set_payment_completed(
        db_session, student, payment_id=payment.id, transaction_id="pay_001"
    )

    with pytest.raises(InvalidTransition):
        await set_payment_completed(
            db_session, student, payment_id=payment.id, transaction_id="pay_002"
        )

    refreshed = await db_session.get(Payment, payment.id)
    assert refreshed.transaction_id == "pay_001"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failed_payment_is_terminal(db_session, student):
    payment = await _payment(db_session, student)
    await update_payment_status(
        db_session, student, payment_id=payment.id, status=PaymentStatus.FAILED
    )

    with pytest.raises(InvalidTransition):
        await update_payment_status(
            db_session, student, payment_id=payment.id, status=PaymentStatus.PENDING
        )
    with pytest.raises(InvalidTransition):
        await set_payment_completed(
            db_session, student, payment_id=payment.id, transaction_id="pay_late"
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_mark_as_paid_is_admin_only_and_audited(db_session, admin, student):
    payment = await _payment(db_session, student)

    with pytest.raises(Forbidden):
        await mark_as_paid(db_session, student, payment_id=payment.id)

    paid = await mark_as_paid(
        db_session, admin, payment_id=payment.id, notes="Paid at front desk"
    )

    assert paid.status == PaymentStatus.COMPLETED
    assert paid.method == "cash"
    assert paid.notes == "Paid at front desk"
    audit = await db_session.scalar(
        select(AuditLog).where(AuditLog.action == "mark_as_paid")
    )
    assert audit is not None
    assert audit.admin_user_id == admin.user_id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_other_student_cannot_read_payment(db_session, student):
    payment = await _payment(db_session, student)
    _, _, other = await create_member(db_session)

    with pytest.raises(Forbidden):
        await get_payment_details(db_session, other, payment_id=payment.id)

    details = await get_payment_details(db_session, student, payment_id=payment.id)
    assert details["sport_name"] == "Football"
    assert details["batch_name"] == "Evening Seniors"


# ---------------------------------------------------------------------------
# Refunds and deletion
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_refund_rules(db_session, admin, student):
    payment = await _payment(db_session, student, amount=1500.0)

    with pytest.raises(InvalidTransition):
        await process_refund(
            db_session,
            admin,
            payment_id=payment.id,
            refund_amount=100.0,
            refund_reason="Not yet paid",
        )

    await mark_as_paid(db_session, admin, payment_id=payment.id)

    for bad_amount in (0, -5.0, 1500.01):
        with pytest.raises(Conflict):
            await process_refund(
                db_session,
                admin,
                payment_id=payment.id,
                refund_amount=bad_amount,
                refund_reason="Bad amount",
            )

    refunded = await process_refund(
        db_session,
        admin,
        payment_id=payment.id,
        refund_amount=500.0,
        refund_reason="Missed sessions",
    )
    assert refunded.refunded is True
    assert refunded.refund_amount == 500.0
    assert refunded.refund_date is not None

    with pytest.raises(Conflict):
        await process_refund(
            db_session,
            admin,
            payment_id=payment.id,
            refund_amount=100.0,
            refund_reason="Again",
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completed_payment_cannot_be_deleted(db_session, admin, student):
    payment = await _payment(db_session, student)
    pending = await _payment(db_session, student)
    await mark_as_paid(db_session, admin, payment_id=payment.id)

    with pytest.raises(Conflict):
        await delete_payment(db_session, admin, payment_id=payment.id)

    await delete_payment(db_session, admin, payment_id=pending.id)
    assert await db_session.get(Payment, pending.id) is None


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_invoice_sets_receipt_and_period(db_session, admin, student):
    enrollment = await _enroll(db_session, student)

    invoice = await generate_invoice(
        db_session,
        admin,
        user_id=student.user_id,
        enrollment_id=enrollment.id,
        amount=2000.0,
    )

    assert invoice.status == PaymentStatus.PENDING
    assert invoice.method == "pending"
    assert invoice.receipt_number.startswith("REC-")
    assert len(invoice.payment_period) == 7


@pytest.mark.asyncio
@pytest.mark.unit
async def test_bulk_invoices_are_all_or_nothing(db_session, admin, student):
    enrollment = await _enroll(db_session, student)
    _, _, other = await create_member(db_session)

    with pytest.raises(NotFound):
        await generate_bulk_invoices(
            db_session,
            admin,
            enrollment_id=enrollment.id,
            amount=1500.0,
            user_ids=[student.user_id, uuid.uuid4()],
        )
    count = await db_session.scalar(select(func.count(Payment.id)))
    assert count == 0

    invoices = await generate_bulk_invoices(
        db_session,
        admin,
        enrollment_id=enrollment.id,
        amount=1500.0,
        user_ids=[student.user_id, other.user_id, student.user_id],
    )
    assert len(invoices) == 2
    assert all(i.receipt_number is None for i in invoices)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_bulk_invoices_can_skip_existing_pending(db_session, admin, student):
    enrollment = await _enroll(db_session, student)
    _, _, other = await create_member(db_session)
    await generate_invoice(
        db_session,
        admin,
        user_id=student.user_id,
        enrollment_id=enrollment.id,
        amount=1500.0,
    )

    invoices = await generate_bulk_invoices(
        db_session,
        admin,
        enrollment_id=enrollment.id,
        amount=1500.0,
        user_ids=[student.user_id, other.user_id],
        skip_existing_pending=True,
    )

    assert [i.user_id for i in invoices] == [other.user_id]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stats_are_net_of_refunds(db_session, admin, student):
    card = await _payment(db_session, student, amount=1500.0)
    cash = await _payment(db_session, student, amount=1000.0)
    await _payment(db_session, student, amount=700.0)

    await set_payment_completed(
        db_session, admin, payment_id=card.id, transaction_id="pay_card"
    )
    await mark_as_paid(db_session, admin, payment_id=cash.id)
    await process_refund(
        db_session,
        admin,
        payment_id=card.id,
        refund_amount=500.0,
        refund_reason="Partial refund",
    )

    stats = await get_payment_stats(db_session, admin)

    assert stats["total_revenue"] == 2000.0
    assert stats["completed_payments"] == 2
    assert stats["pending_payments"] == 1
    assert stats["refunded_payments"] == 1
    assert stats["revenue_by_method"] == {"razorpay": 1000.0, "cash": 1000.0}
    assert stats["revenue_by_sport"] == {"Football": 2000.0}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_my_payments(db_session, student):
    await _payment(db_session, student)
    _, _, other = await create_member(db_session)
    await _payment(db_session, other)

    mine = await list_payments_for_user(db_session, student)

    assert len(mine) == 1
    assert mine[0].user_id == student.user_id
    with pytest.raises(Forbidden):
        await list_payments_for_user(db_session, student, user_id=other.user_id)


# ---------------------------------------------------------------------------
# Razorpay checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_round_trip(db_session, student):
    payment = await _payment(db_session, student, amount=1500.0)
    sent = []
    client = _razorpay(_order_handler(sent))

    order = await create_checkout_order(
        db_session, student, payment_id=payment.id, client=client
    )

    assert order["order_id"] == "order_TEST123"
    assert order["amount"] == 150000
    assert order["key_id"] == "rzp_test_key"
    assert sent[0]["receipt"] == str(payment.id)
    attempted = await db_session.get(Payment, payment.id)
    assert attempted.status == PaymentStatus.ATTEMPTED

    signature = sign("order_TEST123", "pay_XYZ", "rzp_test_secret")
    completed = await verify_checkout(
        db_session,
        student,
        payment_id=payment.id,
        razorpay_order_id="order_TEST123",
        razorpay_payment_id="pay_XYZ",
        razorpay_signature=signature,
        client=client,
    )

    assert completed.status == PaymentStatus.COMPLETED
    assert completed.transaction_id == "pay_XYZ"
    assert completed.method == "razorpay"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_rejects_bad_signature(db_session, student):
    payment = await _payment(
        db_session,
        student,
        status=PaymentStatus.ATTEMPTED,
        gateway_order_id="order_TEST123",
    )
    client = _razorpay(_order_handler([]))

    with pytest.raises(Conflict, match="Invalid payment signature"):
        await verify_checkout(
            db_session,
            student,
            payment_id=payment.id,
            razorpay_order_id="order_TEST123",
            razorpay_payment_id="pay_XYZ",
            razorpay_signature="0" * 64,
            client=client,
        )
    with pytest.raises(Conflict, match="Invalid payment signature"):
        await verify_checkout(
            db_session,
            student,
            payment_id=payment.id,
            razorpay_order_id="order_TEST123",
            razorpay_payment_id="pay_XYZ",
            razorpay_signature="\u00e9" * 64,
            client=client,
        )
    with pytest.raises(Conflict, match="Order does not match"):
        await verify_checkout(
            db_session,
            student,
            payment_id=payment.id,
            razorpay_order_id="order_OTHER",
            razorpay_payment_id="pay_XYZ",
            razorpay_signature=sign("order_OTHER", "pay_XYZ", "rzp_test_secret"),
            client=client,
        )

    unchanged = await db_session.get(Payment, payment.id)
    assert unchanged.status == PaymentStatus.ATTEMPTED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_gateway_error_is_upstream_failure(db_session, student):
    payment = await _payment(db_session, student)

    def handler(request):
        return httpx.Response(
            400, json={"error": {"description": "Amount exceeds maximum"}}
        )

    with pytest.raises(UpstreamFailure):
        await create_checkout_order(
            db_session, student, payment_id=payment.id, client=_razorpay(handler)
        )

    unchanged = await db_session.get(Payment, payment.id)
    assert unchanged.status == PaymentStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_gateway_html_error_page_is_upstream_failure(db_session, student):
    payment = await _payment(db_session, student)

    def handler(request):
        return httpx.Response(502, text="<html><body>Bad Gateway</body></html>")

    with pytest.raises(UpstreamFailure):
        await create_checkout_order(
            db_session, student, payment_id=payment.id, client=_razorpay(handler)
        )

    unchanged = await db_session.get(Payment, payment.id)
    assert unchanged.status == PaymentStatus.PENDING
