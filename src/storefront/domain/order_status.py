"""
Order status lifecycle.

    EN_ATTENTE -> CONFIRMEE -> EN_PREPARATION -> EXPEDIEE -> LIVREE
         \\            \\
          +-> ANNULEE <-+

Cancellation is only possible before preparation starts, and customers may
only cancel orders that are still pending.
"""

from enum import Enum
from typing import Dict, List, Tuple, Union

from storefront.core.exceptions import BusinessLogicError, ValidationError


class OrderStatus(str, Enum):
    EN_ATTENTE = "EN_ATTENTE"
    CONFIRMEE = "CONFIRMEE"
    EN_PREPARATION = "EN_PREPARATION"
    EXPEDIEE = "EXPEDIEE"
    LIVREE = "LIVREE"
    ANNULEE = "ANNULEE"


TRANSITIONS: Dict[OrderStatus, Tuple[OrderStatus, ...]] = {
    OrderStatus.EN_ATTENTE: (OrderStatus.CONFIRMEE, OrderStatus.ANNULEE),
    OrderStatus.CONFIRMEE: (OrderStatus.EN_PREPARATION, OrderStatus.ANNULEE),
    OrderStatus.EN_PREPARATION: (OrderStatus.EXPEDIEE,),
    OrderStatus.EXPEDIEE: (OrderStatus.LIVREE,),
    OrderStatus.LIVREE: (),
    OrderStatus.ANNULEE: (),
}

LABELS: Dict[OrderStatus, str] = {
    OrderStatus.EN_ATTENTE: "En attente",
    OrderStatus.CONFIRMEE: "Confirmée",
    OrderStatus.EN_PREPARATION: "En préparation",
    OrderStatus.EXPEDIEE: "Expédiée",
    OrderStatus.LIVREE: "Livrée",
    OrderStatus.ANNULEE: "Annulée",
}

StatusLike = Union[OrderStatus, str]


def parse_status(value: StatusLike) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown order status: {value}",
            field_errors=[{"field": "status", "message": f"must be one of {', '.join(s.value for s in OrderStatus)}"}]
        )


def allowed_transitions(status: StatusLike) -> List[OrderStatus]:
    return list(TRANSITIONS[parse_status(status)])


def is_terminal(status: StatusLike) -> bool:
    return not TRANSITIONS[parse_status(status)]


def can_transition(current: StatusLike, target: StatusLike) -> bool:
    return parse_status(target) in TRANSITIONS[parse_status(current)]


def transition(current: StatusLike, target: StatusLike) -> OrderStatus:
    """Return the new status, or raise if the move is not in the table"""
    current_status = parse_status(current)
    target_status = parse_status(target)

    if target_status not in TRANSITIONS[current_status]:
        allowed = ", ".join(s.value for s in TRANSITIONS[current_status]) or "none"
        raise BusinessLogicError(
            f"Invalid status transition: {current_status.value} -> {target_status.value}. "
            f"Allowed transitions: {allowed}",
            rule="invalid_status_transition"
        )
    return target_status


def can_customer_cancel(status: StatusLike) -> bool:
    return parse_status(status) == OrderStatus.EN_ATTENTE


def label(status: StatusLike) -> str:
    return LABELS[parse_status(status)]
