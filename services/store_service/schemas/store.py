"""Product and order schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.store_service.models.enums import OrderStatus

# ============================================================================
# PRODUCTS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    stock: int = Field(0, ge=0)
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(ProductBase):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# ORDERS
# ============================================================================


class OrderCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    payment_id: Optional[uuid.UUID] = None
    pickup_session: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    pickup_session: Optional[str] = None


class OrderResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    amount: float
    payment_id: Optional[uuid.UUID] = None
    status: OrderStatus
    pickup_session: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    product: Optional[ProductResponse] = None

    model_config = ConfigDict(from_attributes=True)
