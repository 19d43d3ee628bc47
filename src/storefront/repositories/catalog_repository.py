from decimal import Decimal
from typing import Any, Dict, Iterable, Optional
import logging

from sqlalchemy import bindparam, text

from storefront.core.exceptions import NotFoundError
from storefront.domain.catalog import CatalogEntry, CatalogSnapshot
from storefront.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


_PRODUCT_COLUMNS = """
    id, reference, name, slug, price_cents, promo_price_cents,
    stock_quantity, tax_rate, unit, image_url, is_active
"""


class CatalogRepository(BaseRepository[CatalogEntry]):
    """
    Read-only access to the product catalog.

    The cart never writes products; it reads the current facts for the
    products referenced by a cart in a single query.
    """

    def get_by_id(self, product_id: int) -> CatalogEntry:
        entry = self.find_by_id(product_id)
        if entry is None:
            raise NotFoundError("Product", str(product_id))
        return entry

    def find_by_id(self, product_id: int) -> Optional[CatalogEntry]:
        query = f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = :product_id"
        row = self.execute_single_query(query, {"product_id": product_id})
        return self._row_to_entry(row) if row else None

    def get_snapshot(self, product_ids: Iterable[int]) -> CatalogSnapshot:
        """
        Current catalog entries keyed by product id.

        Ids with no product row are simply absent from the result.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        query = text(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id IN :ids"
        ).bindparams(bindparam("ids", expanding=True))

        rows = self.execute_query(query, {"ids": ids})
        snapshot = {row["id"]: self._row_to_entry(row) for row in rows}

        missing = len(ids) - len(snapshot)
        if missing:
            logger.info(f"{missing} product(s) referenced by a cart no longer exist")

        return snapshot

    @staticmethod
    def _row_to_entry(row: Dict[str, Any]) -> CatalogEntry:
        # Numeric comes back as Decimal on PostgreSQL and float on SQLite
        return CatalogEntry(
            product_id=row["id"],
            name=row["name"],
            price_cents=int(row["price_cents"]),
            promo_price_cents=(
                int(row["promo_price_cents"]) if row["promo_price_cents"] is not None else None
            ),
            stock=int(row["stock_quantity"]),
            tax_rate=Decimal(str(row["tax_rate"])),
            is_active=bool(row["is_active"]),
            slug=row["slug"],
            reference=row["reference"],
            unit=row["unit"],
            image_url=row["image_url"],
        )
