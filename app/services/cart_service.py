"""
Cart service — plain CRUD over carts and their product lines.

Only ACTIVE carts accept line changes; CHECKED_OUT and ABANDONED carts are
frozen. Each (cart, product) pair has at most one line, so setting a
product's quantity replaces the line instead of appending a new one.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import CartNotEditableError, CartNotFoundError, UserNotFoundError
from app.models.cart import Cart, CartProduct, CartStatus
from app.models.user import User

logger = logging.getLogger(__name__)


async def create_cart(db: AsyncSession, user_id: uuid.UUID) -> Cart:
    """
    Open an empty ACTIVE cart for a user.

    Raises:
        UserNotFoundError: If the user doesn't exist.
    """
    if await db.get(User, user_id) is None:
        raise UserNotFoundError(f"User {user_id} does not exist")

    cart = Cart(user_id=user_id, status=CartStatus.ACTIVE, cart_products=[])
    db.add(cart)
    await db.flush()
    logger.info("Opened cart %s for user %s", cart.id, user_id)
    return await get_cart(db, cart.id)


async def get_cart(db: AsyncSession, cart_id: uuid.UUID) -> Cart:
    """
    Raises:
        CartNotFoundError: If the cart doesn't exist.
    """
    result = await db.execute(
        select(Cart)
        .where(Cart.id == cart_id)
        .execution_options(populate_existing=True)
    )
    cart = result.scalar_one_or_none()
    if cart is None:
        raise CartNotFoundError(cart_id)
    return cart


async def list_user_carts(db: AsyncSession, user_id: uuid.UUID) -> list[Cart]:
    """List a user's carts, newest first."""
    result = await db.execute(
        select(Cart)
        .where(Cart.user_id == user_id)
        .order_by(Cart.created_at.desc())
    )
    return list(result.scalars().all())


async def set_cart_product(
    db: AsyncSession,
    cart_id: uuid.UUID,
    product_id: uuid.UUID,
    quantity: int,
) -> Cart:
    """
    Set how many of a product the cart holds.

    A quantity of 0 removes the line; any other value creates or replaces it.

    Raises:
        CartNotFoundError: If the cart doesn't exist.
        CartNotEditableError: If the cart is not ACTIVE.
    """
    cart = await get_cart(db, cart_id)
    if cart.status != CartStatus.ACTIVE:
        raise CartNotEditableError(cart_id, cart.status.value)

    line = next((p for p in cart.cart_products if p.product_id == product_id), None)
    if quantity == 0:
        if line is not None:
            cart.cart_products.remove(line)
    elif line is None:
        cart.cart_products.append(CartProduct(product_id=product_id, quantity=quantity))
    else:
        line.quantity = quantity

    await db.flush()
    return await get_cart(db, cart_id)


async def update_cart_status(
    db: AsyncSession,
    cart_id: uuid.UUID,
    status: CartStatus,
) -> Cart:
    """
    Raises:
        CartNotFoundError: If the cart doesn't exist.
    """
    cart = await get_cart(db, cart_id)
    cart.status = status
    await db.flush()
    logger.info("Cart %s moved to %s", cart_id, status.name)
    return await get_cart(db, cart_id)


async def delete_cart(db: AsyncSession, cart_id: uuid.UUID) -> None:
    """
    Raises:
        CartNotFoundError: If the cart doesn't exist.
    """
    cart = await get_cart(db, cart_id)
    await db.delete(cart)
    await db.flush()
