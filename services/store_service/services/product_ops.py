"""Product catalog management."""

import uuid

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.store_service.models import Order, Product
from services.store_service.schemas import ProductCreate, ProductUpdate
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_product_or_404(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


async def list_products(db: AsyncSession, caller: CallerIdentity) -> list[Product]:
    """Active products; admins also see inactive ones."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    query = select(Product).order_by(Product.name)
    if not caller.is_admin:
        query = query.where(Product.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_product(
    db: AsyncSession, caller: CallerIdentity, *, product_id: uuid.UUID
) -> Product:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    product = await get_product_or_404(db, product_id)
    if not product.is_active and not caller.is_admin:
        raise NotFound("Product not found")
    return product


async def create_product(
    db: AsyncSession, caller: CallerIdentity, data: ProductCreate
) -> Product:
    authorize(caller, Requirement.ADMIN)
    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


async def update_product(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    product_id: uuid.UUID,
    data: ProductUpdate,
) -> Product:
    authorize(caller, Requirement.ADMIN)
    product = await get_product_or_404(db, product_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    await db.commit()
    await db.refresh(product)
    return product


async def delete_product(
    db: AsyncSession, caller: CallerIdentity, *, product_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    product = await get_product_or_404(db, product_id)
    result = await db.execute(
        select(Order.id).where(Order.product_id == product_id).limit(1)
    )
    if result.first() is not None:
        raise Conflict("Product has orders; deactivate it instead")
    await db.delete(product)
    await db.commit()
    logger.info("Deleted product %s", product_id)
