from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class IssueType(str, Enum):
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_INACTIVE = "PRODUCT_INACTIVE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"


class FixAction(str, Enum):
    REMOVE = "REMOVE"
    CLAMP = "CLAMP"


class ChangeType(str, Enum):
    REMOVED = "REMOVED"
    QUANTITY_ADJUSTED = "QUANTITY_ADJUSTED"


@dataclass(frozen=True)
class ValidationIssue:
    """A blocking problem with one line"""
    type: IssueType
    item_id: str
    message: str
    product_name: Optional[str] = None
    available_stock: Optional[int] = None
    requested_quantity: Optional[int] = None


@dataclass(frozen=True)
class SuggestedFix:
    action: FixAction
    item_id: str
    product_name: Optional[str] = None
    new_quantity: Optional[int] = None  # CLAMP only


@dataclass(frozen=True)
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    fixes: List[SuggestedFix] = field(default_factory=list)
    is_empty: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def can_checkout(self) -> bool:
        return self.is_valid and not self.is_empty


@dataclass(frozen=True)
class CartChange:
    """One modification made to the stored cart by apply_fixes"""
    type: ChangeType
    item_id: str
    reason: str
    product_name: Optional[str] = None
    old_quantity: Optional[int] = None
    new_quantity: Optional[int] = None
