import pytest

from storefront.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from storefront.domain.cart import MAX_QUANTITY, Cart, check_quantity


@pytest.fixture
def cart():
    return Cart(cart_id=1, user_id=42)


@pytest.mark.parametrize("quantity", [0, -1, MAX_QUANTITY + 1])
def test_add_rejects_out_of_bounds_quantity(cart, quantity):
    with pytest.raises(ValidationError):
        cart.add_item(product_id=7, quantity=quantity)
    assert cart.is_empty


@pytest.mark.parametrize("quantity", [1.5, "3", True, None])
def test_quantity_must_be_an_integer(quantity):
    with pytest.raises(ValidationError):
        check_quantity(quantity)


def test_bounds_are_inclusive(cart):
    cart.add_item(product_id=1, quantity=1)
    cart.add_item(product_id=2, quantity=MAX_QUANTITY)

    assert cart.total_quantity == 1 + MAX_QUANTITY


def test_adding_same_product_merges_lines(cart):
    first, merged_first = cart.add_item(product_id=7, quantity=2, price_seen_cents=350)
    second, merged_second = cart.add_item(product_id=7, quantity=3, price_seen_cents=320)

    assert not merged_first
    assert merged_second
    assert first is second
    assert cart.item_count == 1
    assert cart.items[0].quantity == 5
    assert cart.items[0].price_seen_cents == 320


def test_merge_overflow_is_rejected_and_line_unchanged(cart):
    cart.add_item(product_id=7, quantity=9000)

    with pytest.raises(BusinessLogicError) as exc_info:
        cart.add_item(product_id=7, quantity=1000)

    assert exc_info.value.details["violated_rule"] == "max_item_quantity_exceeded"
    assert exc_info.value.status_code == 422
    assert cart.items[0].quantity == 9000


def test_lines_keep_insertion_order(cart):
    for product_id in (5, 3, 9):
        cart.add_item(product_id=product_id, quantity=1)
    cart.add_item(product_id=3, quantity=1)

    assert [item.product_id for item in cart.items] == [5, 3, 9]


def test_update_quantity(cart):
    item, _ = cart.add_item(product_id=7, quantity=2)

    cart.update_quantity(item.id, 6)

    assert cart.items[0].quantity == 6


def test_update_to_zero_is_rejected(cart):
    item, _ = cart.add_item(product_id=7, quantity=2)

    with pytest.raises(ValidationError):
        cart.update_quantity(item.id, 0)
    assert cart.items[0].quantity == 2


def test_update_unknown_line(cart):
    with pytest.raises(NotFoundError):
        cart.update_quantity("missing", 1)


def test_remove_last_line_empties_cart(cart):
    item, _ = cart.add_item(product_id=7, quantity=4)

    cart.remove_item(item.id)

    assert cart.is_empty
    assert cart.item_count == 0
    assert cart.total_quantity == 0


def test_remove_unknown_line(cart):
    with pytest.raises(NotFoundError):
        cart.remove_item("missing")


def test_clear_reports_removed_lines(cart):
    cart.add_item(product_id=1, quantity=1)
    cart.add_item(product_id=2, quantity=1)

    assert cart.clear() == 2
    assert cart.clear() == 0


def test_copy_is_independent(cart):
    cart.add_item(product_id=1, quantity=1)
    clone = cart.copy()

    clone.items[0].quantity = 9

    assert cart.items[0].quantity == 1
