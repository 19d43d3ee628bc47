from typing import Any, Dict, List, Sequence
import logging

from storefront.core.exceptions import NotFoundError
from storefront.domain.cart import Cart, CartLineItem
from storefront.domain.validation import CartChange, ChangeType
from storefront.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


_TOUCH_CART = "UPDATE carts SET updated_at = CURRENT_TIMESTAMP WHERE id = :cart_id"


class CartRepository(BaseRepository[Cart]):
    """
    Persistence for carts and their lines.

    Lines are stored with product id, quantity and the last price shown;
    prices are never read back from here for pricing. Every write also
    refreshes carts.updated_at in the same transaction.
    """

    def get_by_id(self, cart_id: int) -> Cart:
        row = self.execute_single_query(
            "SELECT id, user_id FROM carts WHERE id = :cart_id", {"cart_id": cart_id}
        )
        if not row:
            raise NotFoundError("Cart", str(cart_id))
        return self._load_cart(row["id"], row["user_id"])

    def get_or_create_cart(self, user_id: int) -> Cart:
        """
        Get the user's cart, creating an empty one on first access.

        Lines come back in insertion order.
        """
        self.execute_command(
            """
            INSERT INTO carts (user_id, created_at, updated_at)
            VALUES (:user_id, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id) DO NOTHING
            """,
            {"user_id": user_id}
        )

        cart_id = self.execute_scalar(
            "SELECT id FROM carts WHERE user_id = :user_id", {"user_id": user_id}
        )
        if cart_id is None:
            raise NotFoundError("Cart", f"user_id={user_id}")

        return self._load_cart(cart_id, user_id)

    def insert_item(self, cart_id: int, item: CartLineItem) -> None:
        """Append a new line at the end of the cart"""
        self.execute_in_transaction([
            (
                """
                INSERT INTO cart_items
                    (id, cart_id, product_id, quantity, price_seen_cents, position, added_at)
                VALUES (
                    :id, :cart_id, :product_id, :quantity, :price_seen_cents,
                    (SELECT COALESCE(MAX(position), 0) + 1 FROM cart_items WHERE cart_id = :cart_id),
                    CURRENT_TIMESTAMP
                )
                """,
                {
                    "id": item.id,
                    "cart_id": cart_id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price_seen_cents": item.price_seen_cents,
                }
            ),
            (_TOUCH_CART, {"cart_id": cart_id}),
        ])
        logger.debug(f"Inserted line {item.id} into cart {cart_id}")

    def update_item(self, cart_id: int, item: CartLineItem) -> None:
        affected = self.execute_in_transaction([
            (
                """
                UPDATE cart_items
                SET quantity = :quantity, price_seen_cents = :price_seen_cents
                WHERE id = :item_id AND cart_id = :cart_id
                """,
                {
                    "quantity": item.quantity,
                    "price_seen_cents": item.price_seen_cents,
                    "item_id": item.id,
                    "cart_id": cart_id,
                }
            ),
            (_TOUCH_CART, {"cart_id": cart_id}),
        ])
        if affected < 2:
            raise NotFoundError("Cart item", item.id)

    def delete_item(self, cart_id: int, item_id: str) -> None:
        affected = self.execute_in_transaction([
            (
                "DELETE FROM cart_items WHERE id = :item_id AND cart_id = :cart_id",
                {"item_id": item_id, "cart_id": cart_id}
            ),
            (_TOUCH_CART, {"cart_id": cart_id}),
        ])
        if affected < 2:
            raise NotFoundError("Cart item", item_id)

    def clear(self, cart_id: int) -> None:
        self.execute_in_transaction([
            ("DELETE FROM cart_items WHERE cart_id = :cart_id", {"cart_id": cart_id}),
            (_TOUCH_CART, {"cart_id": cart_id}),
        ])

    def apply_changes(self, cart_id: int, changes: Sequence[CartChange]) -> None:
        """Persist the output of a fix pass atomically"""
        if not changes:
            return

        commands = []
        for change in changes:
            if change.type == ChangeType.REMOVED:
                commands.append((
                    "DELETE FROM cart_items WHERE id = :item_id AND cart_id = :cart_id",
                    {"item_id": change.item_id, "cart_id": cart_id}
                ))
            elif change.type == ChangeType.QUANTITY_ADJUSTED:
                commands.append((
                    """
                    UPDATE cart_items SET quantity = :quantity
                    WHERE id = :item_id AND cart_id = :cart_id
                    """,
                    {"quantity": change.new_quantity, "item_id": change.item_id, "cart_id": cart_id}
                ))
        commands.append((_TOUCH_CART, {"cart_id": cart_id}))

        self.execute_in_transaction(commands)
        logger.info(f"Applied {len(changes)} change(s) to cart {cart_id}")

    def count_quantity(self, user_id: int) -> int:
        """Sum of line quantities; 0 when the user has no cart yet"""
        result = self.execute_scalar(
            """
            SELECT COALESCE(SUM(ci.quantity), 0)
            FROM carts c
            JOIN cart_items ci ON ci.cart_id = c.id
            WHERE c.user_id = :user_id
            """,
            {"user_id": user_id}
        )
        return int(result or 0)

    def _load_cart(self, cart_id: int, user_id: int) -> Cart:
        rows = self.execute_query(
            """
            SELECT id, product_id, quantity, price_seen_cents
            FROM cart_items
            WHERE cart_id = :cart_id
            ORDER BY position
            """,
            {"cart_id": cart_id}
        )
        return Cart(cart_id=cart_id, user_id=user_id, items=self._rows_to_items(rows))

    @staticmethod
    def _rows_to_items(rows: List[Dict[str, Any]]) -> List[CartLineItem]:
        return [
            CartLineItem(
                id=row["id"],
                product_id=row["product_id"],
                quantity=row["quantity"],
                price_seen_cents=row["price_seen_cents"],
            )
            for row in rows
        ]
