"""Store order endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus
from services.store_service.schemas import (
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
)
from services.store_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orders", tags=["store"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Order a product; stock is reserved immediately."""
    return await order_ops.create_order(
        db,
        caller,
        product_id=body.product_id,
        quantity=body.quantity,
        payment_id=body.payment_id,
        pickup_session=body.pickup_session,
    )


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    user_id: Optional[uuid.UUID] = None,
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await order_ops.list_orders(
        db, caller, user_id=user_id, status=order_status
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await order_ops.get_order(db, caller, order_id=order_id)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    body: OrderStatusUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await order_ops.update_order_status(
        db,
        caller,
        order_id=order_id,
        status=body.status,
        pickup_session=body.pickup_session,
    )
