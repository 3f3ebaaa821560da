"""Payment state machine, invoices, refunds and revenue statistics.

Status transitions:

    pending   -> attempted | failed | completed
    attempted -> pending | failed
    completed -> (terminal; may be refunded once)
    failed    -> (terminal)

Completion is only reachable from ``pending`` and always runs in one
transaction with its secondary effects: the enrollment is marked paid and
the payer's subscription is activated.
"""

import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.config import get_settings
from libs.common.datetime_utils import epoch_ms, utc_now
from libs.common.errors import Conflict, Forbidden, InvalidTransition, NotFound
from libs.common.errors import UpstreamFailure
from libs.common.logging import get_logger
from services.academy_service.models import Batch, Enrollment, Sport
from services.academy_service.services.enrollment_ops import mark_enrollment_paid
from services.members_service.models import Profile, SubscriptionStatus, User
from services.members_service.services.audit_ops import record_admin_action
from services.payments_service.models import Payment, PaymentStatus
from services.payments_service.razorpay_client import RazorpayClient, RazorpayError
from services.payments_service.schemas import PaymentUpdate
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Transitions reachable through update_payment_status / update_payment.
# Completion has its own guarded path.
STATUS_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.ATTEMPTED, PaymentStatus.FAILED},
    PaymentStatus.ATTEMPTED: {PaymentStatus.PENDING, PaymentStatus.FAILED},
    PaymentStatus.COMPLETED: set(),
    PaymentStatus.FAILED: set(),
}


def new_receipt_number() -> str:
    return f"REC-{epoch_ms()}"


def current_period() -> str:
    return utc_now().strftime("%Y-%m")


async def get_payment_or_404(db: AsyncSession, payment_id: uuid.UUID) -> Payment:
    payment = await db.get(Payment, payment_id)
    if payment is None:
        raise NotFound("Payment not found")
    return payment


# ---------------------------------------------------------------------------
# Guarded writes
# ---------------------------------------------------------------------------


async def _transition(
    db: AsyncSession,
    payment: Payment,
    target: PaymentStatus,
    **values,
) -> None:
    """Move ``payment`` to ``target`` iff it is still in its loaded status."""
    current = payment.status
    if target not in STATUS_TRANSITIONS[current]:
        raise InvalidTransition("payment", current.value, target.value)

    result = await db.execute(
        update(Payment)
        .where(Payment.id == payment.id, Payment.status == current)
        .values(status=target, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise Conflict("Payment was modified concurrently")


async def _complete(
    db: AsyncSession,
    payment: Payment,
    *,
    transaction_id: Optional[str],
    payment_date: Optional[datetime],
    receipt_number: Optional[str],
    method: Optional[str] = None,
    notes: Optional[str] = None,
) -> None:
    """pending -> completed plus secondary effects. Does not commit."""
    if payment.status != PaymentStatus.PENDING:
        raise InvalidTransition(
            "payment", payment.status.value, PaymentStatus.COMPLETED.value
        )

    values = {
        "status": PaymentStatus.COMPLETED,
        "transaction_id": transaction_id,
        "payment_date": payment_date or utc_now(),
        "receipt_number": receipt_number
        or payment.receipt_number
        or new_receipt_number(),
        "updated_at": utc_now(),
    }
    if method:
        values["method"] = method
    if notes is not None:
        values["notes"] = notes

    result = await db.execute(
        update(Payment)
        .where(Payment.id == payment.id, Payment.status == PaymentStatus.PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        # Lost a race with another completion or status change
        await db.rollback()
        fresh = await get_payment_or_404(db, payment.id)
        raise InvalidTransition(
            "payment", fresh.status.value, PaymentStatus.COMPLETED.value
        )

    await mark_enrollment_paid(db, payment.enrollment_id)
    await db.execute(
        update(Profile)
        .where(Profile.user_id == payment.user_id)
        .values(subscription_status=SubscriptionStatus.ACTIVE)
        .execution_options(synchronize_session=False)
    )
    logger.info("Payment %s completed (%s)", payment.id, values["receipt_number"])


# ---------------------------------------------------------------------------
# Payer and admin operations
# ---------------------------------------------------------------------------


async def create_payment(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: uuid.UUID,
    enrollment_id: uuid.UUID,
    amount: float,
    method: str,
) -> Payment:
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=user_id)
    enrollment = await db.get(Enrollment, enrollment_id)
    if enrollment is None:
        raise NotFound("Enrollment not found")
    if enrollment.user_id != user_id:
        raise Forbidden("Enrollment does not belong to this user")

    payment = Payment(
        user_id=user_id,
        enrollment_id=enrollment_id,
        amount=amount,
        method=method,
        status=PaymentStatus.PENDING,
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    logger.info("Created payment %s for enrollment %s", payment.id, enrollment_id)
    return payment


async def update_payment_status(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    status: PaymentStatus,
    notes: Optional[str] = None,
    payment_period: Optional[str] = None,
) -> Payment:
    payment = await get_payment_or_404(db, payment_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=payment.user_id)

    values = {"updated_at": utc_now()}
    if notes is not None:
        values["notes"] = notes
    if payment_period is not None:
        values["payment_period"] = payment_period
    previous = payment.status
    await _transition(db, payment, status, **values)
    await db.commit()
    await db.refresh(payment)
    logger.info("Payment %s: %s -> %s", payment_id, previous.value, status.value)
    return payment


async def set_payment_completed(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    transaction_id: str,
    payment_date: Optional[datetime] = None,
    receipt_number: Optional[str] = None,
) -> Payment:
    payment = await get_payment_or_404(db, payment_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=payment.user_id)

    await _complete(
        db,
        payment,
        transaction_id=transaction_id,
        payment_date=payment_date,
        receipt_number=receipt_number,
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def mark_as_paid(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    method: str = "cash",
    notes: Optional[str] = None,
) -> Payment:
    """Record an offline (cash) payment."""
    authorize(caller, Requirement.ADMIN)
    payment = await get_payment_or_404(db, payment_id)

    await _complete(
        db,
        payment,
        transaction_id=None,
        payment_date=None,
        receipt_number=None,
        method=method,
        notes=notes,
    )
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="mark_as_paid",
        details=f"payment={payment_id} method={method}",
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def process_refund(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    refund_amount: float,
    refund_reason: str,
) -> Payment:
    authorize(caller, Requirement.ADMIN)
    payment = await get_payment_or_404(db, payment_id)

    if payment.status != PaymentStatus.COMPLETED:
        raise InvalidTransition("payment", payment.status.value, "refunded")
    if payment.refunded:
        raise Conflict("Payment already refunded")
    if refund_amount <= 0 or refund_amount > payment.amount:
        raise Conflict("Refund amount must be positive and not exceed the payment")

    result = await db.execute(
        update(Payment)
        .where(
            Payment.id == payment_id,
            Payment.status == PaymentStatus.COMPLETED,
            Payment.refunded.is_(False),
        )
        .values(
            refunded=True,
            refund_amount=refund_amount,
            refund_reason=refund_reason,
            refund_date=utc_now(),
            updated_at=utc_now(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise Conflict("Payment already refunded")

    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="process_refund",
        details=f"payment={payment_id} amount={refund_amount} reason={refund_reason}",
    )
    await db.commit()
    await db.refresh(payment)
    logger.info("Refunded %s on payment %s", refund_amount, payment_id)
    return payment


async def update_payment(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    data: PaymentUpdate,
) -> Payment:
    authorize(caller, Requirement.ADMIN)
    payment = await get_payment_or_404(db, payment_id)

    changes = data.model_dump(exclude_unset=True)
    target = changes.pop("status", None)
    changes["updated_at"] = utc_now()
    if target is not None and target != payment.status:
        await _transition(db, payment, target, **changes)
    else:
        await db.execute(
            update(Payment)
            .where(Payment.id == payment_id)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
    await db.commit()
    await db.refresh(payment)
    return payment


async def delete_payment(
    db: AsyncSession, caller: CallerIdentity, *, payment_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    payment = await get_payment_or_404(db, payment_id)
    if payment.status == PaymentStatus.COMPLETED:
        raise Conflict("Completed payments cannot be deleted")
    await db.delete(payment)
    await db.commit()
    logger.info("Deleted payment %s", payment_id)


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


async def generate_invoice(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: uuid.UUID,
    enrollment_id: uuid.UUID,
    amount: float,
    method: str = "pending",
) -> Payment:
    authorize(caller, Requirement.ADMIN)
    if await db.get(User, user_id) is None:
        raise NotFound("User not found")
    if await db.get(Enrollment, enrollment_id) is None:
        raise NotFound("Enrollment not found")

    invoice = Payment(
        user_id=user_id,
        enrollment_id=enrollment_id,
        amount=amount,
        method=method,
        status=PaymentStatus.PENDING,
        receipt_number=new_receipt_number(),
        payment_period=current_period(),
    )
    db.add(invoice)
    await db.commit()
    await db.refresh(invoice)
    logger.info("Generated invoice %s for user %s", invoice.receipt_number, user_id)
    return invoice


async def generate_bulk_invoices(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    enrollment_id: uuid.UUID,
    amount: float,
    user_ids: list[uuid.UUID],
    skip_existing_pending: Optional[bool] = None,
) -> list[Payment]:
    """One pending payment per user; all-or-nothing."""
    authorize(caller, Requirement.ADMIN)
    if skip_existing_pending is None:
        skip_existing_pending = get_settings().INVOICE_SKIP_EXISTING_PENDING

    if await db.get(Enrollment, enrollment_id) is None:
        raise NotFound("Enrollment not found")

    unique_ids = list(dict.fromkeys(user_ids))
    result = await db.execute(select(User.id).where(User.id.in_(unique_ids)))
    found = set(result.scalars().all())
    missing = [uid for uid in unique_ids if uid not in found]
    if missing:
        raise NotFound(f"User {missing[0]} not found")

    if skip_existing_pending:
        result = await db.execute(
            select(Payment.user_id).where(
                Payment.enrollment_id == enrollment_id,
                Payment.status == PaymentStatus.PENDING,
                Payment.user_id.in_(unique_ids),
            )
        )
        already = set(result.scalars().all())
        unique_ids = [uid for uid in unique_ids if uid not in already]

    period = current_period()
    invoices = [
        Payment(
            user_id=uid,
            enrollment_id=enrollment_id,
            amount=amount,
            method="pending",
            status=PaymentStatus.PENDING,
            payment_period=period,
        )
        for uid in unique_ids
    ]
    db.add_all(invoices)
    await db.commit()
    for invoice in invoices:
        await db.refresh(invoice)

    logger.info(
        "Generated %d invoices for enrollment %s", len(invoices), enrollment_id
    )
    return invoices


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def _detail_query():
    return (
        select(Payment, User, Profile, Batch.name, Sport.name)
        .join(User, User.id == Payment.user_id)
        .outerjoin(Profile, Profile.user_id == Payment.user_id)
        .outerjoin(Enrollment, Enrollment.id == Payment.enrollment_id)
        .outerjoin(Batch, Batch.id == Enrollment.batch_id)
        .outerjoin(Sport, Sport.id == Enrollment.sport_id)
    )


def _detail(row) -> dict:
    payment, user, profile, batch_name, sport_name = row
    data = {c.key: getattr(payment, c.key) for c in Payment.__table__.columns}
    data["user_name"] = profile.full_name if profile else user.name
    data["user_email"] = user.email
    data["batch_name"] = batch_name
    data["sport_name"] = sport_name
    return data


async def get_payment_details(
    db: AsyncSession, caller: CallerIdentity, *, payment_id: uuid.UUID
) -> dict:
    payment = await get_payment_or_404(db, payment_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=payment.user_id)
    row = (await db.execute(_detail_query().where(Payment.id == payment_id))).one()
    return _detail(row)


async def list_payments(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    status: Optional[PaymentStatus] = None,
    user_id: Optional[uuid.UUID] = None,
    enrollment_id: Optional[uuid.UUID] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[dict]:
    authorize(caller, Requirement.ADMIN)
    query = _detail_query()
    if status is not None:
        query = query.where(Payment.status == status)
    if user_id is not None:
        query = query.where(Payment.user_id == user_id)
    if enrollment_id is not None:
        query = query.where(Payment.enrollment_id == enrollment_id)
    if start is not None:
        query = query.where(Payment.created_at >= start)
    if end is not None:
        query = query.where(Payment.created_at <= end)
    result = await db.execute(query.order_by(Payment.created_at.desc()))
    return [_detail(row) for row in result.all()]


async def list_payments_for_user(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: Optional[uuid.UUID] = None,
) -> list[Payment]:
    user_id = user_id or caller.user_id
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=user_id)
    result = await db.execute(
        select(Payment)
        .where(Payment.user_id == user_id)
        .order_by(Payment.created_at.desc())
    )
    return list(result.scalars().all())


def _net(payment: Payment) -> float:
    if payment.refunded and payment.refund_amount:
        return payment.amount - payment.refund_amount
    return payment.amount


async def get_payment_stats(db: AsyncSession, caller: CallerIdentity) -> dict:
    authorize(caller, Requirement.ADMIN)
    result = await db.execute(
        select(Payment, Batch.name, Sport.name)
        .outerjoin(Enrollment, Enrollment.id == Payment.enrollment_id)
        .outerjoin(Batch, Batch.id == Enrollment.batch_id)
        .outerjoin(Sport, Sport.id == Enrollment.sport_id)
    )

    counts = {status: 0 for status in PaymentStatus}
    refunded = 0
    total = 0.0
    by_method: dict[str, float] = defaultdict(float)
    by_sport: dict[str, float] = defaultdict(float)
    by_batch: dict[str, float] = defaultdict(float)

    for payment, batch_name, sport_name in result.all():
        counts[payment.status] += 1
        if payment.status != PaymentStatus.COMPLETED:
            continue
        if payment.refunded:
            refunded += 1
        net = _net(payment)
        total += net
        by_method[payment.method] += net
        if sport_name:
            by_sport[sport_name] += net
        if batch_name:
            by_batch[batch_name] += net

    return {
        "total_revenue": total,
        "completed_payments": counts[PaymentStatus.COMPLETED],
        "pending_payments": counts[PaymentStatus.PENDING],
        "attempted_payments": counts[PaymentStatus.ATTEMPTED],
        "failed_payments": counts[PaymentStatus.FAILED],
        "refunded_payments": refunded,
        "revenue_by_method": dict(by_method),
        "revenue_by_sport": dict(by_sport),
        "revenue_by_batch": dict(by_batch),
    }


async def get_total_revenue_last_month(
    db: AsyncSession, caller: CallerIdentity
) -> float:
    """Net revenue of completed payments created in the last 30 days."""
    authorize(caller, Requirement.ADMIN)
    since = utc_now() - timedelta(days=30)
    result = await db.execute(
        select(Payment).where(
            Payment.status == PaymentStatus.COMPLETED, Payment.created_at >= since
        )
    )
    return sum(_net(p) for p in result.scalars().all())


# ---------------------------------------------------------------------------
# Razorpay checkout
# ---------------------------------------------------------------------------


async def create_checkout_order(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    client: RazorpayClient,
) -> dict:
    payment = await get_payment_or_404(db, payment_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=payment.user_id)
    if payment.status not in (PaymentStatus.PENDING, PaymentStatus.ATTEMPTED):
        raise InvalidTransition(
            "payment", payment.status.value, PaymentStatus.ATTEMPTED.value
        )

    try:
        order = await client.create_order(
            payment.amount,
            receipt=str(payment.id),
            notes={"enrollment_id": str(payment.enrollment_id)},
        )
    except RazorpayError as e:
        raise UpstreamFailure(f"Payment gateway error: {e.message}") from e

    if payment.status == PaymentStatus.PENDING:
        await _transition(
            db,
            payment,
            PaymentStatus.ATTEMPTED,
            gateway_order_id=order.id,
            updated_at=utc_now(),
        )
    else:
        payment.gateway_order_id = order.id
    await db.commit()
    await db.refresh(payment)

    return {
        "payment_id": payment.id,
        "order_id": order.id,
        "amount": order.amount,
        "currency": order.currency,
        "key_id": client.key_id,
    }


async def verify_checkout(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    payment_id: uuid.UUID,
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
    client: RazorpayClient,
) -> Payment:
    """Check the checkout signature and complete the payment."""
    payment = await get_payment_or_404(db, payment_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=payment.user_id)

    if payment.gateway_order_id != razorpay_order_id:
        raise Conflict("Order does not match this payment")
    try:
        valid = client.verify_signature(
            razorpay_order_id, razorpay_payment_id, razorpay_signature
        )
    except RazorpayError as e:
        raise UpstreamFailure(f"Payment gateway error: {e.message}") from e
    if not valid:
        logger.warning("Invalid Razorpay signature for payment %s", payment_id)
        raise Conflict("Invalid payment signature")

    if payment.status == PaymentStatus.ATTEMPTED:
        await _transition(db, payment, PaymentStatus.PENDING)
        await db.refresh(payment)

    await _complete(
        db,
        payment,
        transaction_id=razorpay_payment_id,
        payment_date=None,
        receipt_number=None,
        method="razorpay",
    )
    await db.commit()
    await db.refresh(payment)
    return payment
