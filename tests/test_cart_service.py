import pytest

from storefront.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from storefront.domain.validation import ChangeType, IssueType
from storefront.domain.views import WarningType

USER = 42


def test_new_user_gets_empty_cart(cart_service):
    view = cart_service.get_cart(USER)

    assert view.is_empty
    assert view.user_id == USER
    assert view.cart_id is not None
    assert cart_service.get_cart(USER).cart_id == view.cart_id


def test_add_item_prices_from_catalog(cart_service, add_product):
    product_id = add_product(price_cents=1000, promo_price_cents=800, tax_rate=5.5)

    result = cart_service.add_item(USER, product_id, 3)

    line = result.view.lines[0]
    assert line.effective_price_cents == 800
    assert line.price_seen_cents == 800
    assert result.view.summary.total_ttc_cents == 2400
    assert result.view.summary.subtotal_ht_cents == 2275
    assert result.view.summary.total_tva_cents == 125
    assert "added to cart" in result.message


def test_adding_twice_merges(cart_service, add_product):
    product_id = add_product(stock=10)

    cart_service.add_item(USER, product_id, 2)
    result = cart_service.add_item(USER, product_id, 3)

    assert len(result.view.lines) == 1
    assert result.view.lines[0].quantity == 5
    assert "updated" in result.message


def test_lines_are_returned_in_insertion_order(cart_service, add_product):
    ids = [add_product(name=name) for name in ("Baguette", "Comté", "Beurre")]
    for product_id in ids:
        cart_service.add_item(USER, product_id, 1)

    view = cart_service.get_cart(USER)

    assert [line.product_id for line in view.lines] == ids


def test_add_unknown_product(cart_service):
    with pytest.raises(NotFoundError):
        cart_service.add_item(USER, 999, 1)


def test_add_inactive_product(cart_service, add_product):
    product_id = add_product(is_active=False)

    with pytest.raises(BusinessLogicError) as exc_info:
        cart_service.add_item(USER, product_id, 1)
    assert exc_info.value.details["violated_rule"] == "product_inactive"


@pytest.mark.parametrize("quantity", [0, 10000])
def test_add_out_of_bounds_quantity(cart_service, add_product, quantity):
    product_id = add_product(stock=20000)

    with pytest.raises(ValidationError):
        cart_service.add_item(USER, product_id, quantity)


def test_merge_past_quantity_cap_keeps_line(cart_service, add_product):
    product_id = add_product(stock=20000)
    cart_service.add_item(USER, product_id, 9000)

    with pytest.raises(BusinessLogicError) as exc_info:
        cart_service.add_item(USER, product_id, 1000)

    assert exc_info.value.status_code == 422
    assert exc_info.value.details["violated_rule"] == "max_item_quantity_exceeded"
    assert cart_service.get_cart(USER).lines[0].quantity == 9000


def test_add_beyond_stock_counts_what_is_already_in_cart(cart_service, add_product):
    product_id = add_product(name="Confiture de figues", stock=5)
    cart_service.add_item(USER, product_id, 3)

    with pytest.raises(BusinessLogicError) as exc_info:
        cart_service.add_item(USER, product_id, 3)

    error = exc_info.value
    assert error.details["violated_rule"] == "insufficient_stock"
    assert error.details["available_to_add"] == 2
    assert "at most 2 more" in error.message


def test_line_limit(cart_service, add_product, config):
    config.cart.max_lines_per_cart = 2
    first, second, third = (add_product(name=f"Produit {i}") for i in range(3))
    cart_service.add_item(USER, first, 1)
    cart_service.add_item(USER, second, 1)

    with pytest.raises(BusinessLogicError) as exc_info:
        cart_service.add_item(USER, third, 1)
    assert exc_info.value.details["violated_rule"] == "max_cart_lines_exceeded"

    # merging into an existing line is still allowed
    cart_service.add_item(USER, first, 1)


def test_update_quantity(cart_service, add_product):
    product_id = add_product(stock=10)
    item_id = cart_service.add_item(USER, product_id, 1).item_id

    result = cart_service.update_item_quantity(USER, item_id, 4)

    assert result.view.lines[0].quantity == 4
    assert cart_service.get_cart(USER).lines[0].quantity == 4


def test_update_beyond_stock(cart_service, add_product):
    product_id = add_product(stock=3)
    item_id = cart_service.add_item(USER, product_id, 1).item_id

    with pytest.raises(BusinessLogicError):
        cart_service.update_item_quantity(USER, item_id, 4)


def test_update_someone_elses_line(cart_service, add_product):
    product_id = add_product()
    item_id = cart_service.add_item(USER, product_id, 1).item_id

    with pytest.raises(NotFoundError):
        cart_service.update_item_quantity(USER + 1, item_id, 2)


def test_remove_item(cart_service, add_product):
    product_id = add_product(name="Quiche lorraine")
    item_id = cart_service.add_item(USER, product_id, 2).item_id

    result = cart_service.remove_item(USER, item_id)

    assert result.view.is_empty
    assert result.view.summary.total_quantity == 0
    assert "Quiche lorraine" in result.message


def test_remove_unknown_item(cart_service):
    with pytest.raises(NotFoundError):
        cart_service.remove_item(USER, "does-not-exist")


def test_clear_cart(cart_service, add_product):
    cart_service.add_item(USER, add_product(), 1)
    cart_service.add_item(USER, add_product(), 1)

    assert cart_service.clear_cart(USER).view.is_empty
    assert cart_service.get_cart(USER).is_empty


def test_clear_empty_cart_is_noop(cart_service):
    result = cart_service.clear_cart(USER)

    assert result.view.is_empty
    assert result.message == "Cart is already empty"


def test_item_count_badge(cart_service, add_product):
    assert cart_service.get_item_count(USER).display_count == "0"

    product_id = add_product(stock=500)
    cart_service.add_item(USER, product_id, 99)
    assert cart_service.get_item_count(USER).display_count == "99"

    cart_service.add_item(USER, product_id, 1)
    count = cart_service.get_item_count(USER)
    assert count.count == 100
    assert count.display_count == "99+"


def test_read_reflects_catalog_changes(cart_service, add_product, update_product):
    product_id = add_product(price_cents=1000, stock=10)
    cart_service.add_item(USER, product_id, 2)

    update_product(product_id, price_cents=1200, stock_quantity=1)
    view = cart_service.get_cart(USER)

    assert view.lines[0].subtotal_cents == 2400
    assert {w.type for w in view.warnings} == {WarningType.PRICE_CHANGED, WarningType.INSUFFICIENT_STOCK}


def test_deleted_product_stays_visible(cart_service, add_product, delete_product):
    keep = add_product(price_cents=500)
    gone = add_product(price_cents=700)
    cart_service.add_item(USER, keep, 1)
    cart_service.add_item(USER, gone, 1)

    delete_product(gone)
    view = cart_service.get_cart(USER)

    assert len(view.lines) == 2
    assert not view.lines[1].is_available
    assert view.summary.total_ttc_cents == 500


def test_validate_and_fix(cart_service, add_product, update_product):
    inactive = add_product(name="Taboulé maison")
    low_stock = add_product(name="Comté AOP", price_cents=2800, stock=10)
    fine = add_product(name="Baguette tradition", price_cents=130)
    for product_id in (inactive, low_stock, fine):
        cart_service.add_item(USER, product_id, 5)

    update_product(inactive, is_active=False)
    update_product(low_stock, stock_quantity=2)

    report = cart_service.validate_cart(USER)
    assert not report.result.is_valid
    assert [e.type for e in report.result.errors] == [IssueType.PRODUCT_INACTIVE, IssueType.INSUFFICIENT_STOCK]

    fixed = cart_service.apply_fixes(USER)
    assert [c.type for c in fixed.changes] == [ChangeType.REMOVED, ChangeType.QUANTITY_ADJUSTED]
    assert [line.product_id for line in fixed.view.lines] == [low_stock, fine]
    assert fixed.view.lines[0].quantity == 2
    assert fixed.view.lines[0].subtotal_cents == 5600

    # persisted, and a second pass changes nothing
    assert cart_service.validate_cart(USER).result.can_checkout
    again = cart_service.apply_fixes(USER)
    assert again.changes == []
    assert again.message == "No changes needed"


def test_validate_empty_cart(cart_service):
    result = cart_service.validate_cart(USER).result

    assert result.is_valid
    assert result.is_empty
    assert not result.can_checkout
