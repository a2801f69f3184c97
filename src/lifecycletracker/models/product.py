from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from lifecycletracker.models.cycle import Cycle


class ProductSummary(BaseModel):
    """Product listing entry from the category and tag endpoints."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    label: str | None = None
    category: str | None = None


class ProductDetails(ProductSummary):
    """Product with its full release list, from ``/products/full``."""

    releases: list[Cycle] = Field(default_factory=list)
