"""Cross-service numbers for the admin home screen."""

from collections import Counter

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from services.members_service.models import Profile, SubscriptionStatus, User
from services.payments_service.services.payment_ops import get_payment_stats
from services.store_service.models import Order, OrderStatus, Product
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Orders in these states count as merchandise sold
SOLD_ORDER_STATUSES = (
    OrderStatus.PAID,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.COMPLETED,
)


async def get_stats(db: AsyncSession, caller: CallerIdentity) -> dict:
    authorize(caller, Requirement.ADMIN)
    payments = await get_payment_stats(db, caller)

    profiles = await db.execute(
        select(Profile.role, Profile.subscription_status)
        .join(User, User.id == Profile.user_id)
        .where(User.deleted.is_(False))
    )
    roles: Counter = Counter()
    subscriptions: Counter = Counter()
    for role, subscription_status in profiles.all():
        roles[role.value] += 1
        subscriptions[subscription_status.value] += 1

    orders = await db.execute(
        select(Order.quantity, Order.amount, Product.name)
        .join(Product, Product.id == Order.product_id)
        .where(Order.status.in_(SOLD_ORDER_STATUSES))
    )
    sold = 0
    merchandise_revenue = 0.0
    by_product: dict[str, float] = {}
    for quantity, amount, product_name in orders.all():
        sold += quantity
        merchandise_revenue += amount
        by_product[product_name] = by_product.get(product_name, 0.0) + amount

    return {
        "total_revenue": payments["total_revenue"],
        "user_count": sum(roles.values()),
        "active_users": subscriptions[SubscriptionStatus.ACTIVE.value],
        "revenue_by_sport": payments["revenue_by_sport"],
        "role_distribution": dict(roles),
        "subscription_stats": dict(subscriptions),
        "total_merchandise_sold": sold,
        "total_merchandise_revenue": merchandise_revenue,
        "revenue_by_product": by_product,
    }
