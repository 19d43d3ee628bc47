from datetime import datetime, timezone
from typing import Optional

from flask import abort, current_app, jsonify, request
from marshmallow import Schema, ValidationError

from storefront.db import MAX_BIGINT
from storefront.services.cart_service import CartService


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def get_current_user_id() -> int:
    """Extract and validate user ID from X-User-Id request header."""
    uid = request.headers.get("X-User-Id")
    if not uid:
        abort(401, "Missing X-User-Id header.")
    try:
        user_id = int(uid)
    except ValueError:
        abort(400, "Invalid X-User-Id header: must be a positive integer.")
    if user_id <= 0 or user_id > MAX_BIGINT:
        abort(400, "User ID must be a positive integer within range.")
    return user_id


def load_json_body(schema: Schema) -> dict:
    """Validate the JSON request body against a marshmallow schema (400 on failure)."""
    if not request.is_json:
        abort(400, "Content-Type must be application/json.")

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, "Request body must be a JSON object.")

    try:
        return schema.load(payload)
    except ValidationError as err:
        abort(400, str(err.messages))


def get_cart_service() -> CartService:
    return current_app.extensions["storefront"].get(CartService)
