import pytest

from storefront.core.exceptions import BusinessLogicError, ValidationError
from storefront.domain import order_status
from storefront.domain.order_status import OrderStatus


def test_happy_path():
    status = OrderStatus.EN_ATTENTE
    for target in ("CONFIRMEE", "EN_PREPARATION", "EXPEDIEE", "LIVREE"):
        status = order_status.transition(status, target)

    assert status == OrderStatus.LIVREE
    assert order_status.is_terminal(status)


@pytest.mark.parametrize("current", ["EN_ATTENTE", "CONFIRMEE"])
def test_cancellable_before_preparation(current):
    assert order_status.can_transition(current, "ANNULEE")


@pytest.mark.parametrize("current,target", [
    ("EN_ATTENTE", "LIVREE"),
    ("EN_PREPARATION", "ANNULEE"),
    ("EXPEDIEE", "EN_ATTENTE"),
    ("LIVREE", "ANNULEE"),
    ("ANNULEE", "CONFIRMEE"),
])
def test_illegal_transitions_are_rejected(current, target):
    assert not order_status.can_transition(current, target)

    with pytest.raises(BusinessLogicError) as exc_info:
        order_status.transition(current, target)
    assert exc_info.value.details["violated_rule"] == "invalid_status_transition"


def test_allowed_transitions():
    assert order_status.allowed_transitions(OrderStatus.CONFIRMEE) == [
        OrderStatus.EN_PREPARATION, OrderStatus.ANNULEE
    ]
    assert order_status.allowed_transitions("ANNULEE") == []


def test_only_pending_orders_can_be_cancelled_by_customer():
    assert order_status.can_customer_cancel("EN_ATTENTE")
    assert not order_status.can_customer_cancel("CONFIRMEE")


def test_labels():
    assert order_status.label("EN_PREPARATION") == "En préparation"


def test_unknown_status():
    with pytest.raises(ValidationError):
        order_status.label("PAYEE")
