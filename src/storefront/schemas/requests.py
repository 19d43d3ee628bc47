from marshmallow import Schema, fields, validate

from storefront.db import MAX_BIGINT
from storefront.domain.cart import MAX_QUANTITY, MIN_QUANTITY


class AddCartItemSchema(Schema):
    product_id = fields.Int(required=True, strict=True, validate=validate.Range(min=1, max=MAX_BIGINT))
    quantity = fields.Int(
        load_default=1, strict=True, validate=validate.Range(min=MIN_QUANTITY, max=MAX_QUANTITY)
    )


class UpdateCartItemSchema(Schema):
    quantity = fields.Int(
        required=True, strict=True, validate=validate.Range(min=MIN_QUANTITY, max=MAX_QUANTITY)
    )
