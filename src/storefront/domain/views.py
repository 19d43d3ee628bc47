from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class LineView:
    """A cart line joined with the catalog facts current at read time"""
    item_id: str
    product_id: int
    quantity: int
    is_available: bool
    price_seen_cents: Optional[int] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    reference: Optional[str] = None
    image_url: Optional[str] = None
    unit: Optional[str] = None
    stock: Optional[int] = None
    is_active: bool = False
    tax_rate: Optional[Decimal] = None
    base_price_cents: Optional[int] = None
    promo_price_cents: Optional[int] = None
    effective_price_cents: Optional[int] = None
    is_on_sale: bool = False
    subtotal_cents: int = 0      # TTC
    subtotal_ht_cents: int = 0
    tax_cents: int = 0

    @property
    def price_changed(self) -> bool:
        return (
            self.effective_price_cents is not None
            and self.price_seen_cents is not None
            and self.effective_price_cents != self.price_seen_cents
        )


@dataclass(frozen=True)
class CartSummary:
    item_count: int = 0
    total_quantity: int = 0
    subtotal_ht_cents: int = 0
    total_tva_cents: int = 0
    total_ttc_cents: int = 0


@dataclass(frozen=True)
class ShippingQuote:
    shipping_cents: int
    free_shipping_threshold_cents: int
    remaining_for_free_shipping_cents: int
    total_with_shipping_cents: int

    @property
    def is_free(self) -> bool:
        return self.shipping_cents == 0


class WarningType(str, Enum):
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    PRODUCT_INACTIVE = "PRODUCT_INACTIVE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PRICE_CHANGED = "PRICE_CHANGED"


@dataclass(frozen=True)
class CartWarning:
    """Non-blocking advisory about one line; re-derived on every read"""
    type: WarningType
    item_id: str
    message: str
    product_name: Optional[str] = None
    available_stock: Optional[int] = None
    requested_quantity: Optional[int] = None
    previous_price_cents: Optional[int] = None
    current_price_cents: Optional[int] = None


@dataclass(frozen=True)
class CartView:
    cart_id: Optional[int]
    user_id: int
    lines: List[LineView]
    summary: CartSummary
    warnings: List[CartWarning]
    shipping: ShippingQuote
    currency: str = "EUR"

    @property
    def is_empty(self) -> bool:
        return not self.lines
