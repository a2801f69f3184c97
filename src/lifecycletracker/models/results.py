from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from lifecycletracker.models.cycle import Cycle


class EolStatus(StrEnum):
    ACTIVE = "active"
    APPROACHING_EOL = "approaching_eol"
    END_OF_LIFE = "end_of_life"
    UNKNOWN = "unknown"


# Serialised field names (camelCase) are consumed by report formatters and CI
# outputs. Renaming a field is a breaking change.
_RESULT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ProductVersionInfo(BaseModel):
    """Classified lifecycle facts for one (product, cycle) pair."""

    model_config = _RESULT_CONFIG

    product: str
    cycle: str
    status: EolStatus
    eol_date: str | None = None
    days_until_eol: int | None = None
    release_date: str | None = None
    latest_version: str | None = None
    is_lts: bool = False
    support_date: str | None = None
    link: str | None = None
    discontinued_date: str | None = None
    is_discontinued: bool = False
    extended_support_date: str | None = None
    has_extended_support: bool = False
    latest_release_date: str | None = None
    days_since_latest_release: int | None = None
    raw_data: Cycle


class ProductFailure(BaseModel):
    """Diagnostic for a product whose registry lookup failed."""

    model_config = _RESULT_CONFIG

    product: str
    message: str
    code: str
    status_code: int | None = None


class ActionResults(BaseModel):
    """Aggregate of one analysis run. Built once, read-only afterwards."""

    model_config = _RESULT_CONFIG

    eol_detected: bool
    approaching_eol: bool
    stale_detected: bool
    discontinued_detected: bool
    total_products_checked: int
    total_cycles_checked: int
    products: list[ProductVersionInfo]
    eol_products: list[ProductVersionInfo]
    approaching_eol_products: list[ProductVersionInfo]
    stale_products: list[ProductVersionInfo]
    discontinued_products: list[ProductVersionInfo]
    extended_support_products: list[ProductVersionInfo]
    latest_versions: dict[str, str]
    failures: list[ProductFailure] = []
    summary: str
