import pytest

from storefront.core.config import Config


@pytest.fixture
def env(monkeypatch):
    for name in ("ENVIRONMENT", "DATABASE_URL", "CART_MAX_QUANTITY", "CURRENCY",
                 "SHIPPING_STANDARD_FEE_CENTS", "SHIPPING_FREE_THRESHOLD_CENTS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(env):
    config = Config()

    assert config.environment == "development"
    assert not config.is_production
    assert config.cart.max_quantity_per_item == 9999
    assert config.cart.currency == "EUR"
    assert config.shipping.standard_fee_cents == 1500
    assert config.shipping.free_shipping_threshold_cents == 15000
    config.validate()


def test_reads_environment(env):
    env.setenv("SHIPPING_FREE_THRESHOLD_CENTS", "9900")
    env.setenv("CURRENCY", "eur")
    env.setenv("DB_ECHO", "true")

    config = Config()

    assert config.shipping.free_shipping_threshold_cents == 9900
    assert config.cart.currency == "EUR"
    assert config.database.echo is True


def test_negative_shipping_fee_is_rejected(env):
    env.setenv("SHIPPING_STANDARD_FEE_CENTS", "-1")

    with pytest.raises(ValueError):
        Config().validate()


def test_inverted_quantity_bounds_are_rejected(env):
    env.setenv("CART_MAX_QUANTITY", "0")

    with pytest.raises(ValueError):
        Config().validate()


def test_quantity_cap_above_storage_limit_is_rejected(env):
    env.setenv("CART_MAX_QUANTITY", "20000")

    with pytest.raises(ValueError):
        Config().validate()


def test_unsupported_currency_is_rejected(env):
    env.setenv("CURRENCY", "JPY")

    with pytest.raises(ValueError):
        Config().validate()


def test_sqlite_not_allowed_in_production(env):
    env.setenv("ENVIRONMENT", "production")
    env.setenv("DATABASE_URL", "sqlite:///storefront.db")

    config = Config()

    assert config.is_production
    with pytest.raises(ValueError):
        config.validate()
