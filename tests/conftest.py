# tests/conftest.py
import itertools

import pytest
from sqlalchemy import text

from storefront.app import create_app
from storefront.core.config import Config, DatabaseConfig
from storefront.core.dependencies import build_container
from storefront.db import Base, create_db_engine, init_db
from storefront.services.cart_service import CartService

# In-memory SQLite: fast and isolated, one fresh schema per test
TEST_DATABASE_URL = "sqlite://"

_refs = itertools.count(1)


@pytest.fixture
def config() -> Config:
    cfg = Config()
    cfg.environment = "testing"
    cfg.app.environment = "testing"
    cfg.database = DatabaseConfig(url=TEST_DATABASE_URL)
    return cfg


@pytest.fixture
def engine(config):
    engine = create_db_engine(config.database)
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def add_product(engine):
    """Insert a catalog product and return its id."""

    def _add(
        name="Pommes Gala Bio",
        price_cents=350,
        stock=100,
        promo_price_cents=None,
        tax_rate=5.5,
        is_active=True,
        unit="kg",
    ):
        n = next(_refs)
        with engine.begin() as conn:
            result = conn.execute(
                text(
                    "INSERT INTO products "
                    "(reference, name, slug, price_cents, promo_price_cents, stock_quantity, "
                    " tax_rate, unit, is_active) "
                    "VALUES (:reference, :name, :slug, :price, :promo, :stock, :tax_rate, :unit, :active)"
                ),
                {
                    "reference": f"TST-{n:04d}",
                    "name": name,
                    "slug": f"test-product-{n}",
                    "price": price_cents,
                    "promo": promo_price_cents,
                    "stock": stock,
                    "tax_rate": float(tax_rate),
                    "unit": unit,
                    "active": is_active,
                },
            )
            return result.lastrowid

    return _add


@pytest.fixture
def update_product(engine):
    """Change catalog facts behind the cart's back."""

    def _update(product_id, **values):
        assignments = ", ".join(f"{column} = :{column}" for column in values)
        params = dict(values, product_id=product_id)
        with engine.begin() as conn:
            conn.execute(text(f"UPDATE products SET {assignments} WHERE id = :product_id"), params)

    return _update


@pytest.fixture
def delete_product(engine):
    def _delete(product_id):
        with engine.begin() as conn:
            conn.execute(text("DELETE FROM products WHERE id = :product_id"), {"product_id": product_id})

    return _delete


@pytest.fixture
def cart_service(config, engine) -> CartService:
    return build_container(config, engine).get(CartService)


@pytest.fixture
def app(config, engine):
    app = create_app(config, engine)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
