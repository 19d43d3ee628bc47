from sqlalchemy import Boolean, BigInteger, CheckConstraint, Column, DateTime, Integer, Numeric, Text, true
from sqlalchemy.sql import func

from storefront.db import Base, BigIntPK


class Product(Base):
    """
    A sellable catalog product, maintained by the back-office.

    This service only reads it: the cart joins against these rows on every
    request to get current price, promotion, stock and availability.

    price_cents and promo_price_cents are tax-inclusive (TTC) and stored as
    integer cents to avoid floating-point rounding errors. 3.50€ -> 350.
    tax_rate is the VAT band in percent (5.5, 10 or 20 for France).
    """

    __tablename__ = "products"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    reference = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    price_cents = Column(BigInteger, nullable=False)
    promo_price_cents = Column(BigInteger, nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0, server_default="0")
    tax_rate = Column(Numeric(4, 2), nullable=False, default=20, server_default="20")
    unit = Column(Text, nullable=False, default="piece", server_default="piece")
    image_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_product_price"),
        CheckConstraint("promo_price_cents IS NULL OR promo_price_cents >= 0", name="ck_product_promo_price"),
        CheckConstraint("stock_quantity >= 0", name="ck_product_stock"),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} reference={self.reference!r} name={self.name!r}>"
