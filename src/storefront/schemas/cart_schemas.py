from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.domain.validation import CartChange, SuggestedFix, ValidationIssue, ValidationResult
from storefront.domain.views import CartSummary, CartView, CartWarning, LineView, ShippingQuote
from storefront.schemas.common_schemas import MoneyField
from storefront.utils.formatting_utils import FormattingUtils


class ProductInfo(BaseModel):
    """Catalog facts for a line, as of this response"""
    id: int
    name: str
    slug: Optional[str] = None
    reference: Optional[str] = None
    image_url: Optional[str] = None
    unit: Optional[str] = None
    stock: int
    is_active: bool
    tax_rate: float = Field(description="VAT rate in percent")
    tax_rate_display: str


class CartItemResponse(BaseModel):
    """Cart line in API responses; product is null once it has left the catalog"""
    id: str = Field(description="Cart line identifier")
    product_id: int
    quantity: int
    is_available: bool
    product: Optional[ProductInfo] = None
    base_price: Optional[MoneyField] = None
    promo_price: Optional[MoneyField] = None
    unit_price: Optional[MoneyField] = Field(default=None, description="Effective TTC unit price")
    is_on_sale: bool = False
    price_seen: Optional[MoneyField] = Field(default=None, description="Unit price shown when last changed")
    price_changed: bool = False
    subtotal: MoneyField = Field(description="Line total, tax included")
    subtotal_ht: MoneyField
    tax: MoneyField

    @classmethod
    def from_line(cls, line: LineView, currency: str) -> "CartItemResponse":
        product = None
        if line.is_available:
            product = ProductInfo(
                id=line.product_id,
                name=line.name,
                slug=line.slug,
                reference=line.reference,
                image_url=line.image_url,
                unit=line.unit,
                stock=line.stock,
                is_active=line.is_active,
                tax_rate=float(line.tax_rate),
                tax_rate_display=FormattingUtils.format_tax_rate(line.tax_rate),
            )

        return cls(
            id=line.item_id,
            product_id=line.product_id,
            quantity=line.quantity,
            is_available=line.is_available,
            product=product,
            base_price=MoneyField.of(line.base_price_cents, currency),
            promo_price=MoneyField.of(line.promo_price_cents if line.is_on_sale else None, currency),
            unit_price=MoneyField.of(line.effective_price_cents, currency),
            is_on_sale=line.is_on_sale,
            price_seen=MoneyField.of(line.price_seen_cents, currency),
            price_changed=line.price_changed,
            subtotal=MoneyField(cents=line.subtotal_cents, currency=currency),
            subtotal_ht=MoneyField(cents=line.subtotal_ht_cents, currency=currency),
            tax=MoneyField(cents=line.tax_cents, currency=currency),
        )


class CartSummaryResponse(BaseModel):
    item_count: int = Field(description="Number of distinct lines")
    total_quantity: int
    subtotal_ht: MoneyField
    total_tva: MoneyField
    total_ttc: MoneyField

    @classmethod
    def from_summary(cls, summary: CartSummary, currency: str) -> "CartSummaryResponse":
        return cls(
            item_count=summary.item_count,
            total_quantity=summary.total_quantity,
            subtotal_ht=MoneyField(cents=summary.subtotal_ht_cents, currency=currency),
            total_tva=MoneyField(cents=summary.total_tva_cents, currency=currency),
            total_ttc=MoneyField(cents=summary.total_ttc_cents, currency=currency),
        )


class ShippingResponse(BaseModel):
    shipping: MoneyField
    is_free: bool
    free_shipping_threshold: MoneyField
    remaining_for_free_shipping: MoneyField
    total_with_shipping: MoneyField

    @classmethod
    def from_quote(cls, quote: ShippingQuote, currency: str) -> "ShippingResponse":
        return cls(
            shipping=MoneyField(cents=quote.shipping_cents, currency=currency),
            is_free=quote.is_free,
            free_shipping_threshold=MoneyField(cents=quote.free_shipping_threshold_cents, currency=currency),
            remaining_for_free_shipping=MoneyField(
                cents=quote.remaining_for_free_shipping_cents, currency=currency
            ),
            total_with_shipping=MoneyField(cents=quote.total_with_shipping_cents, currency=currency),
        )


class WarningResponse(BaseModel):
    type: str
    item_id: str
    message: str
    product_name: Optional[str] = None
    available_stock: Optional[int] = None
    requested_quantity: Optional[int] = None
    previous_price: Optional[MoneyField] = None
    current_price: Optional[MoneyField] = None

    @classmethod
    def from_warning(cls, warning: CartWarning, currency: str) -> "WarningResponse":
        return cls(
            type=warning.type.value,
            item_id=warning.item_id,
            message=warning.message,
            product_name=warning.product_name,
            available_stock=warning.available_stock,
            requested_quantity=warning.requested_quantity,
            previous_price=MoneyField.of(warning.previous_price_cents, currency),
            current_price=MoneyField.of(warning.current_price_cents, currency),
        )


class CartResponse(BaseModel):
    """Complete cart information, reconciled against the catalog"""
    id: Optional[int] = Field(description="Cart identifier")
    user_id: int
    items: List[CartItemResponse]
    summary: CartSummaryResponse
    shipping: ShippingResponse
    warnings: List[WarningResponse]
    is_empty: bool
    currency: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "user_id": 42,
                "items": [],
                "summary": {
                    "item_count": 0,
                    "total_quantity": 0,
                    "subtotal_ht": {"cents": 0, "amount": 0.0, "currency": "EUR", "display": "0.00€"},
                    "total_tva": {"cents": 0, "amount": 0.0, "currency": "EUR", "display": "0.00€"},
                    "total_ttc": {"cents": 0, "amount": 0.0, "currency": "EUR", "display": "0.00€"},
                },
                "warnings": [],
                "is_empty": True,
                "currency": "EUR",
            }
        }
    )

    @classmethod
    def from_view(cls, view: CartView) -> "CartResponse":
        currency = view.currency
        return cls(
            id=view.cart_id,
            user_id=view.user_id,
            items=[CartItemResponse.from_line(line, currency) for line in view.lines],
            summary=CartSummaryResponse.from_summary(view.summary, currency),
            shipping=ShippingResponse.from_quote(view.shipping, currency),
            warnings=[WarningResponse.from_warning(w, currency) for w in view.warnings],
            is_empty=view.is_empty,
            currency=currency,
        )


class ValidationIssueResponse(BaseModel):
    type: str
    item_id: str
    message: str
    product_name: Optional[str] = None
    available_stock: Optional[int] = None
    requested_quantity: Optional[int] = None

    @classmethod
    def from_issue(cls, issue: ValidationIssue) -> "ValidationIssueResponse":
        return cls(
            type=issue.type.value,
            item_id=issue.item_id,
            message=issue.message,
            product_name=issue.product_name,
            available_stock=issue.available_stock,
            requested_quantity=issue.requested_quantity,
        )


class SuggestedFixResponse(BaseModel):
    action: str
    item_id: str
    product_name: Optional[str] = None
    new_quantity: Optional[int] = None

    @classmethod
    def from_fix(cls, fix: SuggestedFix) -> "SuggestedFixResponse":
        return cls(
            action=fix.action.value,
            item_id=fix.item_id,
            product_name=fix.product_name,
            new_quantity=fix.new_quantity,
        )


class CartValidationResponse(BaseModel):
    is_valid: bool = Field(description="No blocking issue on any line")
    is_empty: bool
    can_checkout: bool = Field(description="Valid and not empty")
    errors: List[ValidationIssueResponse]
    fixes: List[SuggestedFixResponse]
    cart: CartResponse

    @classmethod
    def from_result(cls, result: ValidationResult, view: CartView) -> "CartValidationResponse":
        return cls(
            is_valid=result.is_valid,
            is_empty=result.is_empty,
            can_checkout=result.can_checkout,
            errors=[ValidationIssueResponse.from_issue(e) for e in result.errors],
            fixes=[SuggestedFixResponse.from_fix(f) for f in result.fixes],
            cart=CartResponse.from_view(view),
        )


class CartChangeResponse(BaseModel):
    type: str
    item_id: str
    reason: str
    product_name: Optional[str] = None
    old_quantity: Optional[int] = None
    new_quantity: Optional[int] = None

    @classmethod
    def from_change(cls, change: CartChange) -> "CartChangeResponse":
        return cls(
            type=change.type.value,
            item_id=change.item_id,
            reason=change.reason,
            product_name=change.product_name,
            old_quantity=change.old_quantity,
            new_quantity=change.new_quantity,
        )


class CartFixResponse(BaseModel):
    cart: CartResponse
    changes: List[CartChangeResponse]


class CartCountResponse(BaseModel):
    count: int
    display_count: str
