from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from storefront.utils.formatting_utils import FormattingUtils
from storefront.utils.money import cents_to_decimal


class MoneyField(BaseModel):
    """Standardized money representation"""
    cents: int = Field(description="Amount in cents")
    currency: str = Field(default="EUR", description="Currency code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"cents": 2400, "amount": 24.0, "currency": "EUR", "display": "24.00€"}
        }
    )

    @field_validator('cents')
    @classmethod
    def validate_cents(cls, v):
        if v < 0:
            raise ValueError('Amount cannot be negative')
        return v

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        if len(v) != 3:
            raise ValueError('Currency must be 3-character code')
        return v.upper()

    @computed_field
    @property
    def amount(self) -> float:
        return float(cents_to_decimal(self.cents))

    @computed_field
    @property
    def display(self) -> str:
        return FormattingUtils.format_money(self.cents, self.currency)

    @classmethod
    def of(cls, cents: Optional[int], currency: str = "EUR") -> Optional["MoneyField"]:
        return None if cents is None else cls(cents=cents, currency=currency)


class ErrorResponse(BaseModel):
    """Standard error response format"""
    success: bool = Field(default=False, description="Always false for errors")
    error: Dict[str, Any] = Field(description="Error information")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
