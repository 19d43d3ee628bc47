# Re-export all ORM models from a single entry point.
#
# Importing them here also registers every table on Base.metadata before
# init_db() calls Base.metadata.create_all().

from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product

__all__ = [
    "Product",
    "Cart",
    "CartItem",
]
