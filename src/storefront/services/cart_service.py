from dataclasses import dataclass, field
from typing import List, Optional
import logging

from storefront.core.config import CartConfig, ShippingConfig
from storefront.core.exceptions import BusinessLogicError, NotFoundError
from storefront.domain.cart import Cart, check_quantity
from storefront.domain.validation import CartChange, ValidationResult
from storefront.domain.views import CartView
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.catalog_repository import CatalogRepository
from storefront.services import reconciliation
from storefront.utils.formatting_utils import FormattingUtils

logger = logging.getLogger(__name__)


@dataclass
class CartMutationResult:
    view: CartView
    message: str
    item_id: Optional[str] = None


@dataclass
class ValidationReport:
    result: ValidationResult
    view: CartView


@dataclass
class FixReport:
    view: CartView
    changes: List[CartChange] = field(default_factory=list)
    message: str = ""


@dataclass
class CartCount:
    count: int
    display_count: str


class CartService:
    """
    Shopping cart business logic service

    Responsibilities:
    - Enforce cart business rules on every mutation
    - Reconcile stored lines with the live catalog on every read
    - Apply checkout fixes atomically

    Nothing here caches prices: each call loads the cart, takes a fresh
    catalog snapshot for the products it references and rebuilds the view.
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        catalog_repository: CatalogRepository,
        cart_config: CartConfig,
        shipping_config: ShippingConfig
    ):
        self.cart_repo = cart_repository
        self.catalog_repo = catalog_repository
        self.cart_config = cart_config
        self.shipping_config = shipping_config

    def get_cart(self, user_id: int) -> CartView:
        cart = self.cart_repo.get_or_create_cart(user_id)
        view = self._build_view(cart)

        if view.warnings:
            logger.info(f"Cart {cart.cart_id} for user {user_id} has {len(view.warnings)} warning(s)")
        return view

    def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> CartMutationResult:
        """
        Add a product to the user's cart, merging with an existing line.

        Business Rules:
        - Product must exist and be active
        - Quantity already in cart plus the requested quantity must fit in stock
        - A new line cannot push the cart past max_lines_per_cart
        """
        max_quantity = self.cart_config.max_quantity_per_item
        check_quantity(quantity, max_quantity)

        logger.info(f"Adding item to cart - user: {user_id}, product: {product_id}, quantity: {quantity}")

        product = self.catalog_repo.get_by_id(product_id)
        if not product.is_active:
            logger.warning(f"Rejected add of inactive product {product_id} for user {user_id}")
            raise BusinessLogicError(
                f'"{product.name}" is no longer available',
                rule="product_inactive",
                product_id=product_id
            )

        cart = self.cart_repo.get_or_create_cart(user_id)
        existing = cart.get_item_by_product(product_id)
        in_cart = existing.quantity if existing else 0

        if in_cart + quantity > product.stock:
            available_to_add = max(0, product.stock - in_cart)
            if available_to_add == 0:
                message = (
                    f'Insufficient stock. You already have {in_cart} "{product.name}" '
                    f"in your cart (stock: {product.stock})"
                )
            else:
                message = (
                    f'Insufficient stock. You can add at most {available_to_add} more "{product.name}" '
                    f"(stock: {product.stock}, in cart: {in_cart})"
                )
            logger.warning(f"Rejected add for user {user_id}: {message}")
            raise BusinessLogicError(
                message,
                rule="insufficient_stock",
                available_stock=product.stock,
                in_cart=in_cart,
                available_to_add=available_to_add
            )

        if existing is None and cart.item_count >= self.cart_config.max_lines_per_cart:
            logger.warning(f"Cart {cart.cart_id} for user {user_id} is at its line limit")
            raise BusinessLogicError(
                f"Cannot add more than {self.cart_config.max_lines_per_cart} different items to cart",
                rule="max_cart_lines_exceeded"
            )

        line, merged = cart.add_item(
            product_id,
            quantity,
            price_seen_cents=product.effective_price_cents,
            max_quantity=max_quantity
        )

        if merged:
            self.cart_repo.update_item(cart.cart_id, line)
            message = f'Quantity of "{product.name}" updated'
        else:
            self.cart_repo.insert_item(cart.cart_id, line)
            message = f'"{product.name}" added to cart'

        logger.info(f"Cart {cart.cart_id}: {message} (line {line.id}, quantity {line.quantity})")
        return CartMutationResult(view=self._build_view(cart), message=message, item_id=line.id)

    def update_item_quantity(self, user_id: int, item_id: str, quantity: int) -> CartMutationResult:
        """
        Set the quantity of one of the user's lines.

        Business Rules:
        - The line must be in the caller's cart
        - Product must still exist and be active
        - New quantity cannot exceed stock
        """
        max_quantity = self.cart_config.max_quantity_per_item
        check_quantity(quantity, max_quantity)

        cart = self.cart_repo.get_or_create_cart(user_id)
        item = cart.get_item_by_id(item_id)
        if item is None:
            raise NotFoundError("Cart item", item_id)

        product = self.catalog_repo.get_by_id(item.product_id)

        if not product.is_active:
            logger.warning(f"Rejected update of line {item_id}: product {product.product_id} inactive")
            raise BusinessLogicError(
                f'"{product.name}" is no longer available. Please remove it from your cart.',
                rule="product_inactive",
                product_id=product.product_id
            )

        if quantity > product.stock:
            logger.warning(f"Rejected update of line {item_id}: {quantity} > stock {product.stock}")
            raise BusinessLogicError(
                f'Insufficient stock for "{product.name}" ({product.stock} available)',
                rule="insufficient_stock",
                available_stock=product.stock,
                requested_quantity=quantity
            )

        old_quantity = item.quantity
        cart.update_quantity(
            item_id,
            quantity,
            price_seen_cents=product.effective_price_cents,
            max_quantity=max_quantity
        )
        self.cart_repo.update_item(cart.cart_id, item)

        logger.info(f"Cart {cart.cart_id}: line {item_id} quantity {old_quantity} -> {quantity}")
        return CartMutationResult(view=self._build_view(cart), message="Quantity updated", item_id=item_id)

    def remove_item(self, user_id: int, item_id: str) -> CartMutationResult:
        cart = self.cart_repo.get_or_create_cart(user_id)
        item = cart.remove_item(item_id)

        product = self.catalog_repo.find_by_id(item.product_id)
        product_name = product.name if product else "Product"

        self.cart_repo.delete_item(cart.cart_id, item_id)

        logger.info(f"Cart {cart.cart_id}: removed line {item_id} ({product_name})")
        return CartMutationResult(
            view=self._build_view(cart),
            message=f'"{product_name}" removed from cart',
            item_id=item_id
        )

    def clear_cart(self, user_id: int) -> CartMutationResult:
        """Empty the cart; clearing an already empty cart is a no-op"""
        cart = self.cart_repo.get_or_create_cart(user_id)

        removed = cart.clear()
        if removed:
            self.cart_repo.clear(cart.cart_id)
            logger.info(f"Cleared cart {cart.cart_id} for user {user_id} ({removed} line(s) removed)")
            message = "Cart cleared"
        else:
            message = "Cart is already empty"

        return CartMutationResult(view=self._build_view(cart), message=message)

    def get_item_count(self, user_id: int) -> CartCount:
        """Total quantity for the navbar badge"""
        count = self.cart_repo.count_quantity(user_id)
        return CartCount(
            count=count,
            display_count=FormattingUtils.format_badge_count(count, self.cart_config.badge_cap)
        )

    def validate_cart(self, user_id: int) -> ValidationReport:
        cart = self.cart_repo.get_or_create_cart(user_id)
        snapshot = self.catalog_repo.get_snapshot(item.product_id for item in cart.items)

        result = reconciliation.validate_for_checkout(cart, snapshot)
        if result.errors:
            logger.info(f"Cart {cart.cart_id} failed checkout validation with {len(result.errors)} error(s)")

        return ValidationReport(result=result, view=self._view_from_snapshot(cart, snapshot))

    def apply_fixes(self, user_id: int) -> FixReport:
        """
        Validate the cart and apply every suggested fix in one transaction.

        Running it twice in a row makes no further changes.
        """
        cart = self.cart_repo.get_or_create_cart(user_id)
        snapshot = self.catalog_repo.get_snapshot(item.product_id for item in cart.items)

        validation = reconciliation.validate_for_checkout(cart, snapshot)
        fixed, changes = reconciliation.apply_fixes(cart, validation)

        if not changes:
            return FixReport(
                view=self._view_from_snapshot(cart, snapshot),
                changes=[],
                message="No changes needed"
            )

        self.cart_repo.apply_changes(cart.cart_id, changes)
        logger.info(f"Applied {len(changes)} fix(es) to cart {cart.cart_id} for user {user_id}")

        return FixReport(
            view=self._view_from_snapshot(fixed, snapshot),
            changes=changes,
            message=f"{len(changes)} change(s) applied to your cart"
        )

    def _build_view(self, cart: Cart) -> CartView:
        snapshot = self.catalog_repo.get_snapshot(item.product_id for item in cart.items)
        return self._view_from_snapshot(cart, snapshot)

    def _view_from_snapshot(self, cart: Cart, snapshot) -> CartView:
        return reconciliation.build_cart_view(
            cart, snapshot, self.shipping_config, currency=self.cart_config.currency
        )
