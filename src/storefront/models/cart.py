from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy import ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.db import Base, BigIntPK


class Cart(Base):
    """
    A shopping cart belonging to a user.

    A user has exactly one cart (unique user_id); it is created on first
    access and emptied rather than deleted. updated_at is refreshed whenever
    its lines change.
    """

    __tablename__ = "carts"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    items = relationship(
        "CartItem", back_populates="cart", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Cart id={self.id} user_id={self.user_id}>"


class CartItem(Base):
    """
    A product + quantity line inside a cart.

    product_id has no foreign key: the catalog may delete a
    product while it sits in carts, and the cart must keep showing that line
    so the user can remove it.

    position keeps insertion order. price_seen_cents is the unit price the
    user was last shown; it is never used for pricing.
    """

    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True)
    cart_id = Column(
        BigInteger, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False
    )
    product_id = Column(BigInteger, nullable=False)
    quantity = Column(Integer, nullable=False)
    price_seen_cents = Column(BigInteger, nullable=True)
    position = Column(Integer, nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("quantity >= 1 AND quantity <= 9999", name="ck_cart_item_quantity"),
        UniqueConstraint("cart_id", "product_id", name="uq_cart_item_product"),
    )

    cart = relationship("Cart", back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<CartItem id={self.id} product_id={self.product_id} "
            f"qty={self.quantity}>"
        )
