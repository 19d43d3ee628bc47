from flask import Blueprint

from storefront.routes.utils import (
    get_cart_service, get_current_user_id, load_json_body, success_response
)
from storefront.schemas.cart_schemas import (
    CartChangeResponse, CartCountResponse, CartFixResponse, CartResponse, CartValidationResponse
)
from storefront.schemas.requests import AddCartItemSchema, UpdateCartItemSchema

cart_bp = Blueprint("cart", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()


def _cart_payload(view) -> dict:
    return CartResponse.from_view(view).model_dump(mode="json")


@cart_bp.route("", methods=["GET"])
def get_cart():
    """Return the current user's cart, reconciled with the live catalog."""
    user_id = get_current_user_id()
    view = get_cart_service().get_cart(user_id)
    return success_response(_cart_payload(view))


@cart_bp.route("/count", methods=["GET"])
def get_cart_count():
    """Total quantity for the navbar badge."""
    user_id = get_current_user_id()
    count = get_cart_service().get_item_count(user_id)
    payload = CartCountResponse(count=count.count, display_count=count.display_count)
    return success_response(payload.model_dump(mode="json"))


@cart_bp.route("/items", methods=["POST"])
def add_cart_item():
    """Add a product to the cart, or increment its quantity if already present."""
    user_id = get_current_user_id()
    data = load_json_body(_add_schema)

    result = get_cart_service().add_item(user_id, data["product_id"], data["quantity"])
    return success_response(_cart_payload(result.view), result.message, 201)


@cart_bp.route("/items/<item_id>", methods=["PUT"])
def update_cart_item(item_id: str):
    user_id = get_current_user_id()
    data = load_json_body(_update_schema)

    result = get_cart_service().update_item_quantity(user_id, item_id, data["quantity"])
    return success_response(_cart_payload(result.view), result.message)


@cart_bp.route("/items/<item_id>", methods=["DELETE"])
def delete_cart_item(item_id: str):
    user_id = get_current_user_id()
    result = get_cart_service().remove_item(user_id, item_id)
    return success_response(_cart_payload(result.view), result.message)


@cart_bp.route("", methods=["DELETE"])
def clear_cart():
    user_id = get_current_user_id()
    result = get_cart_service().clear_cart(user_id)
    return success_response(_cart_payload(result.view), result.message)


@cart_bp.route("/validate", methods=["GET"])
def validate_cart():
    """Checkout pre-flight: blocking issues plus the fix for each."""
    user_id = get_current_user_id()
    report = get_cart_service().validate_cart(user_id)
    payload = CartValidationResponse.from_result(report.result, report.view)
    return success_response(payload.model_dump(mode="json"))


@cart_bp.route("/fix", methods=["POST"])
def fix_cart():
    """Apply every suggested fix and return the corrected cart."""
    user_id = get_current_user_id()
    report = get_cart_service().apply_fixes(user_id)

    payload = CartFixResponse(
        cart=CartResponse.from_view(report.view),
        changes=[CartChangeResponse.from_change(c) for c in report.changes],
    )
    return success_response(payload.model_dump(mode="json"), report.message)
