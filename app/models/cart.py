"""
Cart model — a user's shopping cart and its product lines.

A cart belongs to exactly one user and holds at most one line per product.
Products are owned by the catalog service; here they are only referenced
by their opaque UUID.

Cart status:
  - ACTIVE: the cart can be edited
  - CHECKED_OUT: converted into an order, frozen
  - ABANDONED: closed without checkout, frozen
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class CartStatus(str, enum.Enum):
    ACTIVE = "active"
    CHECKED_OUT = "checked_out"
    ABANDONED = "abandoned"


class Cart(Base):
    __tablename__ = "carts"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[CartStatus] = mapped_column(
        Enum(CartStatus),
        default=CartStatus.ACTIVE,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    user: Mapped["User"] = relationship(back_populates="carts")

    # selectin: products are always serialized with the cart, and lazy
    # loading is not available in async context
    cart_products: Mapped[list["CartProduct"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CartProduct(Base):
    __tablename__ = "cart_products"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_products_quantity_positive"),
    )

    # Composite key: one line per (cart, product)
    cart_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("carts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    cart: Mapped["Cart"] = relationship(back_populates="cart_products")
