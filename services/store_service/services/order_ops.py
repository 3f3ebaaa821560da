"""Store orders: stock reservation and the order status machine."""

import uuid
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    Conflict,
    Forbidden,
    InsufficientStock,
    InvalidTransition,
    NotFound,
)
from libs.common.logging import get_logger
from services.payments_service.models import Payment, PaymentStatus
from services.store_service.models import Order, OrderStatus, Product
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.READY_FOR_PICKUP, OrderStatus.CANCELLED},
    OrderStatus.READY_FOR_PICKUP: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


async def get_order_or_404(db: AsyncSession, order_id: uuid.UUID) -> Order:
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


async def take_stock(db: AsyncSession, product_id: uuid.UUID, quantity: int) -> bool:
    """Atomically decrement stock; False when not enough is left."""
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def return_stock(db: AsyncSession, product_id: uuid.UUID, quantity: int) -> None:
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


async def create_order(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    product_id: uuid.UUID,
    quantity: int,
    payment_id: Optional[uuid.UUID] = None,
    pickup_session: Optional[str] = None,
) -> Order:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    product = await db.get(Product, product_id)
    if product is None or not product.is_active:
        raise NotFound("Product not found")

    initial_status = OrderStatus.PENDING
    if payment_id is not None:
        payment = await db.get(Payment, payment_id)
        if payment is None:
            raise NotFound("Payment not found")
        if payment.user_id != caller.user_id:
            raise Forbidden("Payment does not belong to you")
        if payment.status != PaymentStatus.COMPLETED:
            raise Conflict("Payment is not completed")
        if payment.refunded:
            raise Conflict("Payment has been refunded")
        if payment.amount < product.price * quantity:
            raise Conflict("Payment does not cover the order amount")
        used = await db.scalar(
            select(Order.id).where(Order.payment_id == payment_id).limit(1)
        )
        if used is not None:
            raise Conflict("Payment is already attached to an order")
        initial_status = OrderStatus.PAID

    if not await take_stock(db, product_id, quantity):
        await db.rollback()
        raise InsufficientStock()

    order = Order(
        user_id=caller.user_id,
        product_id=product_id,
        quantity=quantity,
        amount=product.price * quantity,
        payment_id=payment_id,
        status=initial_status,
        pickup_session=pickup_session,
    )
    db.add(order)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent order claimed the same payment; the rollback also
        # returns the stock taken above.
        await db.rollback()
        raise Conflict("Payment is already attached to an order")
    await db.refresh(order)

    logger.info(
        "Order %s: %d x %s for user %s (%s)",
        order.id,
        quantity,
        product.name,
        caller.user_id,
        initial_status.value,
    )
    return order


async def update_order_status(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    order_id: uuid.UUID,
    status: OrderStatus,
    pickup_session: Optional[str] = None,
) -> Order:
    """Admins drive fulfilment; owners may only cancel a pending order."""
    order = await get_order_or_404(db, order_id)
    current = order.status

    if not caller.is_admin:
        authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=order.user_id)
        if not (current == OrderStatus.PENDING and status == OrderStatus.CANCELLED):
            raise Forbidden("Only pending orders can be cancelled")

    if status not in ORDER_TRANSITIONS[current]:
        raise InvalidTransition("order", current.value, status.value)

    values = {"status": status, "updated_at": utc_now()}
    if pickup_session is not None:
        values["pickup_session"] = pickup_session
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise Conflict("Order was modified concurrently")

    if status == OrderStatus.CANCELLED and get_settings().STORE_RESTOCK_ON_CANCEL:
        await return_stock(db, order.product_id, order.quantity)

    await db.commit()
    await db.refresh(order)
    logger.info("Order %s: %s -> %s", order_id, current.value, status.value)
    return order


async def get_order(
    db: AsyncSession, caller: CallerIdentity, *, order_id: uuid.UUID
) -> Order:
    order = await get_order_or_404(db, order_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=order.user_id)
    return order


async def list_orders(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: Optional[uuid.UUID] = None,
    status: Optional[OrderStatus] = None,
) -> list[Order]:
    """Admins see every order; everyone else only their own."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    query = select(Order).order_by(Order.created_at.desc())
    if caller.is_admin:
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
    else:
        query = query.where(Order.user_id == caller.user_id)
    if status is not None:
        query = query.where(Order.status == status)
    result = await db.execute(query)
    return list(result.scalars().unique().all())
