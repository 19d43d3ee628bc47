from .catalog import CatalogEntry, CatalogSnapshot
from .cart import Cart, CartLineItem, MAX_QUANTITY, MIN_QUANTITY, check_quantity
from .views import CartSummary, CartView, CartWarning, LineView, ShippingQuote, WarningType
from .validation import (
    CartChange, ChangeType, FixAction, IssueType, SuggestedFix, ValidationIssue, ValidationResult
)
from .order_status import OrderStatus

__all__ = [
    "CatalogEntry", "CatalogSnapshot",
    "Cart", "CartLineItem", "MAX_QUANTITY", "MIN_QUANTITY", "check_quantity",
    "CartSummary", "CartView", "CartWarning", "LineView", "ShippingQuote", "WarningType",
    "CartChange", "ChangeType", "FixAction", "IssueType", "SuggestedFix",
    "ValidationIssue", "ValidationResult",
    "OrderStatus",
]
