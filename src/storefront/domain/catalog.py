from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional


DEFAULT_TAX_RATE = Decimal("20")


@dataclass(frozen=True)
class CatalogEntry:
    """
    Current catalog facts for one product, as read at request time.

    Prices are tax-inclusive and stored in cents. The catalog is owned by
    the back-office; the cart only ever reads it.
    """
    product_id: int
    name: str
    price_cents: int
    stock: int
    is_active: bool = True
    promo_price_cents: Optional[int] = None
    tax_rate: Decimal = DEFAULT_TAX_RATE  # percent, e.g. 5.5
    slug: Optional[str] = None
    reference: Optional[str] = None
    unit: str = "piece"
    image_url: Optional[str] = None

    @property
    def has_active_promo(self) -> bool:
        """A promo price only counts while it undercuts the base price"""
        return self.promo_price_cents is not None and self.promo_price_cents < self.price_cents

    @property
    def effective_price_cents(self) -> int:
        return self.promo_price_cents if self.has_active_promo else self.price_cents


# product_id -> entry; a missing key means the product no longer exists
CatalogSnapshot = Dict[int, CatalogEntry]
