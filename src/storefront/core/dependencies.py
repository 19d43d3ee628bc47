from functools import lru_cache
from typing import Any, Callable, Dict, Type, TypeVar

from sqlalchemy.engine import Engine

from storefront.core.config import Config

T = TypeVar('T')


class DependencyContainer:
    """Simple dependency injection container"""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable] = {}

    def register_singleton(self, service_class: Type[T], instance: T) -> None:
        """Register a singleton instance"""
        key = self._get_service_key(service_class)
        self._services[key] = instance

    def register_factory(self, service_class: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory; the first instance it builds is cached"""
        key = self._get_service_key(service_class)
        self._factories[key] = factory

    def get(self, service_class: Type[T]) -> T:
        key = self._get_service_key(service_class)

        if key in self._services:
            return self._services[key]

        if key in self._factories:
            instance = self._factories[key]()
            self._services[key] = instance
            return instance

        raise ValueError(f"Service {service_class.__name__} not registered")

    def _get_service_key(self, service_class: Type[T]) -> str:
        return f"{service_class.__module__}.{service_class.__qualname__}"


def build_container(config: Config, engine: Engine) -> DependencyContainer:
    """Wire repositories and services for one application instance"""
    # Local imports keep this module importable from the repositories
    from storefront.repositories.cart_repository import CartRepository
    from storefront.repositories.catalog_repository import CatalogRepository
    from storefront.services.cart_service import CartService

    container = DependencyContainer()
    container.register_singleton(Config, config)
    container.register_singleton(Engine, engine)
    container.register_factory(CartRepository, lambda: CartRepository(engine))
    container.register_factory(CatalogRepository, lambda: CatalogRepository(engine))
    container.register_factory(
        CartService,
        lambda: CartService(
            cart_repository=container.get(CartRepository),
            catalog_repository=container.get(CatalogRepository),
            cart_config=config.cart,
            shipping_config=config.shipping,
        )
    )
    return container


@lru_cache()
def get_config() -> Config:
    """Process-wide configuration read from the environment"""
    return Config()
