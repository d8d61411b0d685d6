"""
Pydantic schemas for Cart endpoints.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.cart import CartStatus


class CreateCartRequest(BaseModel):
    """Request body for POST /carts."""
    user_id: uuid.UUID


class SetCartProductRequest(BaseModel):
    """Request body for PUT /carts/{id}/products/{product_id}. 0 removes the line."""
    quantity: int = Field(ge=0)


class UpdateCartStatusRequest(BaseModel):
    status: CartStatus


class CartProductResponse(BaseModel):
    product_id: uuid.UUID
    quantity: int

    model_config = {"from_attributes": True}


class CartResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    status: CartStatus
    cart_products: list[CartProductResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
