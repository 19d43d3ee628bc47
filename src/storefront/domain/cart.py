import uuid
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from storefront.core.exceptions import BusinessLogicError, NotFoundError, ValidationError


MIN_QUANTITY = 1
MAX_QUANTITY = 9999


def check_quantity(quantity: int, max_quantity: int = MAX_QUANTITY) -> int:
    """Reject anything that is not an integer in [MIN_QUANTITY, max_quantity]"""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(
            "Quantity must be an integer",
            field_errors=[{"field": "quantity", "message": "must be an integer"}]
        )
    if quantity < MIN_QUANTITY:
        raise ValidationError(
            f"Quantity must be at least {MIN_QUANTITY}",
            field_errors=[{"field": "quantity", "message": f"must be >= {MIN_QUANTITY}"}]
        )
    if quantity > max_quantity:
        raise ValidationError(
            f"Quantity cannot exceed {max_quantity}",
            field_errors=[{"field": "quantity", "message": f"must be <= {max_quantity}"}]
        )
    return quantity


def new_item_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CartLineItem:
    """
    One stored cart line.

    Only the product reference and the quantity are authoritative.
    price_seen_cents remembers the unit price the user was shown when they
    last changed the line; it feeds price-change warnings and nothing else.
    """
    id: str
    product_id: int
    quantity: int
    price_seen_cents: Optional[int] = None


@dataclass
class Cart:
    """A user's cart: an ordered list of line items (insertion order)"""
    cart_id: Optional[int]
    user_id: int
    items: List[CartLineItem] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        """Number of distinct lines"""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def get_item_by_id(self, item_id: str) -> Optional[CartLineItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def get_item_by_product(self, product_id: int) -> Optional[CartLineItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    def copy(self) -> "Cart":
        return Cart(
            cart_id=self.cart_id,
            user_id=self.user_id,
            items=[replace(item) for item in self.items]
        )

    def add_item(
        self,
        product_id: int,
        quantity: int,
        price_seen_cents: Optional[int] = None,
        max_quantity: int = MAX_QUANTITY
    ) -> Tuple[CartLineItem, bool]:
        """
        Add a product, merging into the existing line for it if there is one.

        Returns the affected line and whether it was merged. A merge whose
        combined quantity exceeds max_quantity is rejected outright; the
        line is left untouched.
        """
        check_quantity(quantity, max_quantity)

        existing = self.get_item_by_product(product_id)
        if existing:
            combined = existing.quantity + quantity
            if combined > max_quantity:
                raise BusinessLogicError(
                    f"Cannot have more than {max_quantity} of the same item "
                    f"(already in cart: {existing.quantity})",
                    rule="max_item_quantity_exceeded",
                    current_quantity=existing.quantity,
                    max_quantity=max_quantity
                )
            existing.quantity = combined
            if price_seen_cents is not None:
                existing.price_seen_cents = price_seen_cents
            return existing, True

        item = CartLineItem(
            id=new_item_id(),
            product_id=product_id,
            quantity=quantity,
            price_seen_cents=price_seen_cents
        )
        self.items.append(item)
        return item, False

    def update_quantity(
        self,
        item_id: str,
        quantity: int,
        price_seen_cents: Optional[int] = None,
        max_quantity: int = MAX_QUANTITY
    ) -> CartLineItem:
        """Set a line's quantity. Zero is rejected: removal goes through remove_item."""
        check_quantity(quantity, max_quantity)

        item = self.get_item_by_id(item_id)
        if not item:
            raise NotFoundError("Cart item", item_id)

        item.quantity = quantity
        if price_seen_cents is not None:
            item.price_seen_cents = price_seen_cents
        return item

    def remove_item(self, item_id: str) -> CartLineItem:
        item = self.get_item_by_id(item_id)
        if not item:
            raise NotFoundError("Cart item", item_id)
        self.items = [i for i in self.items if i.id != item_id]
        return item

    def clear(self) -> int:
        """Remove all lines, returning how many were dropped"""
        removed = len(self.items)
        self.items = []
        return removed
