from __future__ import annotations

from lifecycletracker.models.cache import CacheEntry, CacheStats
from lifecycletracker.models.cycle import Cycle
from lifecycletracker.models.product import ProductDetails, ProductSummary
from lifecycletracker.models.results import (
    ActionResults,
    EolStatus,
    ProductFailure,
    ProductVersionInfo,
)

__all__ = [
    # registry
    "Cycle",
    "ProductSummary",
    "ProductDetails",
    # cache
    "CacheEntry",
    "CacheStats",
    # results
    "EolStatus",
    "ProductVersionInfo",
    "ProductFailure",
    "ActionResults",
]
