"""
Cart reconciliation engine.

Pure functions over a stored cart and a catalog snapshot: no I/O, no clock,
no hidden state. The same inputs always give the same view, the same
warnings and the same validation result, so callers can recompute on every
read instead of caching prices on cart lines.

Money rules:
- catalog prices are tax-inclusive (TTC) integer cents
- line HT = round_half_up(TTC / (1 + rate)), line TVA = TTC - HT
- cart totals are sums of line cents, so TTC == HT + TVA exactly
"""

import logging
from typing import Iterable, List, Optional, Tuple

from storefront.core.config import ShippingConfig
from storefront.domain.cart import Cart, CartLineItem
from storefront.domain.catalog import CatalogEntry, CatalogSnapshot
from storefront.domain.validation import (
    CartChange, ChangeType, FixAction, IssueType, SuggestedFix, ValidationIssue, ValidationResult
)
from storefront.domain.views import (
    CartSummary, CartView, CartWarning, LineView, ShippingQuote, WarningType
)
from storefront.utils.money import pre_tax_cents

logger = logging.getLogger(__name__)


def compute_line_view(item: CartLineItem, entry: Optional[CatalogEntry]) -> LineView:
    """Join a stored line with its catalog entry (None if the product is gone)"""
    if entry is None:
        return LineView(
            item_id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            is_available=False,
            price_seen_cents=item.price_seen_cents,
        )

    effective = entry.effective_price_cents
    subtotal = effective * item.quantity
    subtotal_ht = pre_tax_cents(subtotal, entry.tax_rate)

    return LineView(
        item_id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        is_available=True,
        price_seen_cents=item.price_seen_cents,
        name=entry.name,
        slug=entry.slug,
        reference=entry.reference,
        image_url=entry.image_url,
        unit=entry.unit,
        stock=entry.stock,
        is_active=entry.is_active,
        tax_rate=entry.tax_rate,
        base_price_cents=entry.price_cents,
        promo_price_cents=entry.promo_price_cents,
        effective_price_cents=effective,
        is_on_sale=entry.has_active_promo,
        subtotal_cents=subtotal,
        subtotal_ht_cents=subtotal_ht,
        tax_cents=subtotal - subtotal_ht,
    )


def compute_summary(lines: Iterable[LineView]) -> CartSummary:
    lines = list(lines)
    subtotal_ht = sum(line.subtotal_ht_cents for line in lines)
    total_tva = sum(line.tax_cents for line in lines)

    return CartSummary(
        item_count=len(lines),
        total_quantity=sum(line.quantity for line in lines),
        subtotal_ht_cents=subtotal_ht,
        total_tva_cents=total_tva,
        total_ttc_cents=subtotal_ht + total_tva,
    )


def derive_warnings(lines: Iterable[LineView]) -> List[CartWarning]:
    """Informational advisories; never block checkout"""
    warnings: List[CartWarning] = []

    for line in lines:
        if not line.is_available:
            warnings.append(CartWarning(
                type=WarningType.PRODUCT_UNAVAILABLE,
                item_id=line.item_id,
                message="This product is no longer available",
            ))
            continue

        if not line.is_active:
            warnings.append(CartWarning(
                type=WarningType.PRODUCT_INACTIVE,
                item_id=line.item_id,
                product_name=line.name,
                message=f'"{line.name}" is no longer available',
            ))
        elif line.stock <= 0:
            warnings.append(CartWarning(
                type=WarningType.OUT_OF_STOCK,
                item_id=line.item_id,
                product_name=line.name,
                available_stock=0,
                requested_quantity=line.quantity,
                message=f'"{line.name}" is out of stock',
            ))
        elif line.stock < line.quantity:
            warnings.append(CartWarning(
                type=WarningType.INSUFFICIENT_STOCK,
                item_id=line.item_id,
                product_name=line.name,
                available_stock=line.stock,
                requested_quantity=line.quantity,
                message=f'Insufficient stock for "{line.name}" ({line.stock} available)',
            ))

        if line.price_changed:
            direction = "dropped" if line.effective_price_cents < line.price_seen_cents else "increased"
            warnings.append(CartWarning(
                type=WarningType.PRICE_CHANGED,
                item_id=line.item_id,
                product_name=line.name,
                previous_price_cents=line.price_seen_cents,
                current_price_cents=line.effective_price_cents,
                message=f'The price of "{line.name}" has {direction} since it was added',
            ))

    return warnings


def validate_for_checkout(cart: Cart, snapshot: CatalogSnapshot) -> ValidationResult:
    """
    Check every line against the snapshot, in cart order.

    Each blocking issue is paired with the fix that resolves it: lines whose
    product is gone, inactive or out of stock are removed; lines asking for
    more than the stock are clamped to it.
    """
    errors: List[ValidationIssue] = []
    fixes: List[SuggestedFix] = []

    for item in cart.items:
        entry = snapshot.get(item.product_id)

        if entry is None:
            errors.append(ValidationIssue(
                type=IssueType.PRODUCT_NOT_FOUND,
                item_id=item.id,
                message="This product is no longer available",
            ))
            fixes.append(SuggestedFix(FixAction.REMOVE, item.id))
            continue

        if not entry.is_active:
            errors.append(ValidationIssue(
                type=IssueType.PRODUCT_INACTIVE,
                item_id=item.id,
                product_name=entry.name,
                message=f'"{entry.name}" is no longer available',
            ))
            fixes.append(SuggestedFix(FixAction.REMOVE, item.id, entry.name))
            continue

        if item.quantity > entry.stock:
            if entry.stock <= 0:
                errors.append(ValidationIssue(
                    type=IssueType.OUT_OF_STOCK,
                    item_id=item.id,
                    product_name=entry.name,
                    available_stock=0,
                    requested_quantity=item.quantity,
                    message=f'"{entry.name}" is out of stock',
                ))
                fixes.append(SuggestedFix(FixAction.REMOVE, item.id, entry.name))
            else:
                errors.append(ValidationIssue(
                    type=IssueType.INSUFFICIENT_STOCK,
                    item_id=item.id,
                    product_name=entry.name,
                    available_stock=entry.stock,
                    requested_quantity=item.quantity,
                    message=(
                        f'Insufficient stock for "{entry.name}" '
                        f"({entry.stock} available, {item.quantity} requested)"
                    ),
                ))
                fixes.append(SuggestedFix(FixAction.CLAMP, item.id, entry.name, new_quantity=entry.stock))

    return ValidationResult(errors=errors, fixes=fixes, is_empty=cart.is_empty)


def apply_fixes(cart: Cart, validation: ValidationResult) -> Tuple[Cart, List[CartChange]]:
    """
    Apply the suggested fixes to a copy of the cart.

    Fixes pointing at lines that are already gone, or clamps that would not
    lower the quantity, are skipped, which makes repeated application a no-op.
    """
    fixed = cart.copy()
    changes: List[CartChange] = []

    for fix in validation.fixes:
        item = fixed.get_item_by_id(fix.item_id)
        if item is None:
            continue

        if fix.action == FixAction.REMOVE:
            fixed.remove_item(item.id)
            changes.append(CartChange(
                type=ChangeType.REMOVED,
                item_id=item.id,
                product_name=fix.product_name,
                old_quantity=item.quantity,
                reason="Product unavailable or out of stock",
            ))
        elif fix.action == FixAction.CLAMP and item.quantity > fix.new_quantity:
            old_quantity = item.quantity
            item.quantity = fix.new_quantity
            changes.append(CartChange(
                type=ChangeType.QUANTITY_ADJUSTED,
                item_id=item.id,
                product_name=fix.product_name,
                old_quantity=old_quantity,
                new_quantity=fix.new_quantity,
                reason="Adjusted to available stock",
            ))

    if changes:
        logger.debug(f"Computed {len(changes)} fix(es) for cart {cart.cart_id}")

    return fixed, changes


def quote_shipping(summary: CartSummary, settings: ShippingConfig) -> ShippingQuote:
    """Standard fee, waived at or above the franco threshold; empty carts ship free"""
    threshold = settings.free_shipping_threshold_cents
    total = summary.total_ttc_cents

    if summary.item_count == 0 or total >= threshold:
        shipping = 0
    else:
        shipping = settings.standard_fee_cents

    return ShippingQuote(
        shipping_cents=shipping,
        free_shipping_threshold_cents=threshold,
        remaining_for_free_shipping_cents=max(0, threshold - total),
        total_with_shipping_cents=total + shipping,
    )


def build_cart_view(
    cart: Cart,
    snapshot: CatalogSnapshot,
    shipping_settings: ShippingConfig,
    currency: str = "EUR",
) -> CartView:
    lines = [compute_line_view(item, snapshot.get(item.product_id)) for item in cart.items]
    summary = compute_summary(lines)

    return CartView(
        cart_id=cart.cart_id,
        user_id=cart.user_id,
        lines=lines,
        summary=summary,
        warnings=derive_warnings(lines),
        shipping=quote_shipping(summary, shipping_settings),
        currency=currency,
    )
