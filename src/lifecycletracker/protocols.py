"""Protocol interfaces for swappable components.

The analyzer depends on ``RegistryClientProtocol`` and the client on
``CacheProtocol``, not on the concrete classes. Tests can pass lightweight
in-memory doubles, and a shared cache backend could be introduced without
touching the analyzer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from lifecycletracker.models.cache import CacheStats
    from lifecycletracker.models.cycle import Cycle
    from lifecycletracker.models.product import ProductDetails, ProductSummary


class CacheProtocol(Protocol):
    """Interface for the registry response cache."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, payload: Any) -> None: ...

    def clear(self) -> None: ...

    def stats(self) -> CacheStats: ...


class RegistryClientProtocol(Protocol):
    """Interface for the lifecycle registry client."""

    async def get_all_products(self) -> list[str]: ...

    async def get_product_cycles(self, product: str) -> list[Cycle]: ...

    async def get_product_cycle(self, product: str, cycle: str) -> Cycle: ...

    async def get_cycle_info_with_fallback(
        self,
        product: str,
        version: str,
        enable_fallback: bool = True,
    ) -> Cycle | None: ...

    async def get_products_full_data(self) -> list[ProductDetails]: ...

    async def get_latest_release(self, product: str) -> Cycle: ...

    async def get_categories(self) -> list[str]: ...

    async def get_products_by_category(self, category: str) -> list[ProductSummary]: ...

    async def get_tags(self) -> list[str]: ...

    async def get_products_by_tag(self, tag: str) -> list[ProductSummary]: ...

    async def get_identifier_types(self) -> list[str]: ...
