import logging

from sqlalchemy import BigInteger, Integer, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from storefront.core.config import DatabaseConfig

logger = logging.getLogger(__name__)

Base = declarative_base()

# SQLite only auto-increments INTEGER PRIMARY KEY columns
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

# Largest id a BIGINT column accepts
MAX_BIGINT = 2**63 - 1


def create_db_engine(settings: DatabaseConfig) -> Engine:
    """
    Build the engine for the configured URL.

    In-memory SQLite (tests) needs a single shared connection, otherwise
    every pooled connection would see its own empty database.
    """
    url = settings.url
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.echo, **kwargs)

    return create_engine(
        url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
        pool_pre_ping=True,
    )


def init_db(engine: Engine) -> None:
    """Create the catalog and cart tables if they don't exist"""
    # Importing the models registers them on Base.metadata
    from storefront import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")


def ping(engine: Engine) -> bool:
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1
