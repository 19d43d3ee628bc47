"""
Seed script -- populates the catalog with a sample French grocery range.

Run with:
    python -m storefront.seed

Products are keyed by reference and inserted with ON CONFLICT DO NOTHING,
so the script can be re-run safely. Prices are tax-inclusive; VAT bands are
5.5% (food), 10% (prepared food) and 20% (everything else).
"""

import logging
import re
import unicodedata
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from storefront.core.dependencies import get_config
from storefront.db import create_db_engine, init_db
from storefront.utils.money import to_cents

logger = logging.getLogger(__name__)


# (reference, name, price, promo price, unit, VAT %, stock, active)
PRODUCTS = [
    ("FRL-001", "Pommes Gala Bio", "3.50", None, "kg", 5.5, 120, True),
    ("FRL-002", "Tomates Cerises", "4.90", None, "kg", 5.5, 80, True),
    ("FRL-003", "Bananes Bio", "2.80", None, "kg", 5.5, 150, True),
    ("FRL-005", "Fraises Gariguette", "6.50", "5.20", "kg", 5.5, 40, True),
    ("FRL-008", "Salade Batavia", "1.50", None, "piece", 5.5, 0, True),
    ("LAI-001", "Comté AOP 18 mois", "28.00", None, "kg", 5.5, 25, True),
    ("LAI-002", "Beurre de Baratte", "6.50", None, "piece", 5.5, 60, True),
    ("LAI-006", "Lait frais entier", "1.80", None, "litre", 5.5, 200, True),
    ("BOU-002", "Poulet fermier", "12.50", None, "kg", 5.5, 30, True),
    ("BOU-005", "Saucisses de Toulouse", "14.00", "11.90", "kg", 5.5, 45, True),
    ("EPI-003", "Huile d'olive vierge extra", "12.90", None, "litre", 5.5, 70, True),
    ("EPI-007", "Confiture de figues", "5.40", None, "piece", 5.5, 3, True),
    ("BLG-001", "Baguette tradition", "1.30", None, "piece", 5.5, 90, True),
    ("TRA-001", "Quiche lorraine", "8.00", None, "piece", 10, 15, True),
    ("TRA-002", "Taboulé maison", "4.50", None, "piece", 10, 20, False),
    ("BOI-001", "Vin rouge Bordeaux AOC", "11.50", None, "bouteille", 20, 48, True),
    ("BOI-002", "Champagne brut", "34.00", "29.90", "bouteille", 20, 12, True),
    ("MAI-001", "Panier en osier", "19.90", None, "piece", 20, 8, True),
]


def slugify(name: str) -> str:
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")


def seed(engine: Optional[Engine] = None) -> int:
    """Insert the sample catalog; returns how many products were created."""
    engine = engine or create_db_engine(get_config().database)
    init_db(engine)

    created = 0
    with engine.begin() as conn:
        for reference, name, price, promo, unit, tax_rate, stock, active in PRODUCTS:
            result = conn.execute(
                text(
                    "INSERT INTO products "
                    "(reference, name, slug, price_cents, promo_price_cents, stock_quantity, "
                    " tax_rate, unit, is_active, created_at, updated_at) "
                    "VALUES (:reference, :name, :slug, :price, :promo, :stock, "
                    " :tax_rate, :unit, :active, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP) "
                    "ON CONFLICT (reference) DO NOTHING"
                ),
                {
                    "reference": reference,
                    "name": name,
                    "slug": slugify(name),
                    "price": to_cents(price),
                    "promo": to_cents(promo) if promo else None,
                    "stock": stock,
                    "tax_rate": tax_rate,
                    "unit": unit,
                    "active": active,
                },
            )
            created += max(result.rowcount, 0)

    logger.info(f"Seeded {created} product(s), {len(PRODUCTS) - created} already present")
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s  %(name)s  %(message)s")
    print("Seeding catalog...")
    count = seed()
    print(f"\nSeed completed successfully ({count} new products).")
