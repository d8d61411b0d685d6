"""
Carts router — cart CRUD.

Endpoints:
  POST   /carts                               — Open a cart for a user
  GET    /carts/{cart_id}                     — Get a cart with its lines
  PUT    /carts/{cart_id}/products/{product_id} — Set a product's quantity
  PATCH  /carts/{cart_id}                     — Change the cart status
  DELETE /carts/{cart_id}                     — Delete a cart
  GET    /users/{user_id}/carts               — List a user's carts (user_carts_router)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.cart import (
    CartResponse,
    CreateCartRequest,
    SetCartProductRequest,
    UpdateCartStatusRequest,
)
from app.schemas.user import MessageResponse
from app.services import cart_service

router = APIRouter()
user_carts_router = APIRouter()


@router.post(
    "",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a cart",
)
async def create_cart(
    request: CreateCartRequest,
    db: AsyncSession = Depends(get_db),
):
    return await cart_service.create_cart(db, request.user_id)


@router.get(
    "/{cart_id}",
    response_model=CartResponse,
    summary="Get a cart",
)
async def get_cart(
    cart_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await cart_service.get_cart(db, cart_id)


@router.put(
    "/{cart_id}/products/{product_id}",
    response_model=CartResponse,
    summary="Set a product's quantity in a cart",
)
async def set_cart_product(
    cart_id: uuid.UUID,
    product_id: uuid.UUID,
    request: SetCartProductRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create, replace, or (with quantity 0) remove a cart line. ACTIVE carts only."""
    return await cart_service.set_cart_product(
        db, cart_id, product_id, request.quantity,
    )


@router.patch(
    "/{cart_id}",
    response_model=CartResponse,
    summary="Change a cart's status",
)
async def update_cart_status(
    cart_id: uuid.UUID,
    request: UpdateCartStatusRequest,
    db: AsyncSession = Depends(get_db),
):
    return await cart_service.update_cart_status(db, cart_id, request.status)


@router.delete(
    "/{cart_id}",
    response_model=MessageResponse,
    summary="Delete a cart",
)
async def delete_cart(
    cart_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await cart_service.delete_cart(db, cart_id)
    return MessageResponse(message="Delete cart successfully")


@user_carts_router.get(
    "/{user_id}/carts",
    response_model=list[CartResponse],
    summary="List a user's carts",
)
async def list_user_carts(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await cart_service.list_user_carts(db, user_id)
