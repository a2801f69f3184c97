"""Parsing and validation of check inputs.

Raw inputs come from ``CheckSettings`` as strings (environment variables or
the YAML file). Everything is validated here, before any registry request, and
failures raise ``ValidationError``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from lifecycletracker.errors import ValidationError

if TYPE_CHECKING:
    from lifecycletracker.config import CheckSettings

_PRODUCT_SPLIT_RE = re.compile(r"[,\n]")
_PRODUCT_ID_RE = re.compile(r"^[a-z0-9][a-z0-9._+-]*$")

_CYCLES_MAP = TypeAdapter(dict[str, list[str | int]])


@dataclass(frozen=True)
class CheckRequest:
    """Validated inputs for one analysis run."""

    products: list[str]
    cycles_map: dict[str, list[str]] = field(default_factory=dict)
    version_map: dict[str, str] = field(default_factory=dict)
    semantic_fallback: bool = True


def parse_products(raw: str) -> list[str]:
    """Split a comma- or newline-separated product list.

    Identifiers are lowercased and de-duplicated, keeping first-seen order.
    """
    products: list[str] = []
    for part in _PRODUCT_SPLIT_RE.split(raw):
        product = part.strip().lower()
        if not product:
            continue
        if not _PRODUCT_ID_RE.match(product):
            raise ValidationError(
                f"Invalid product identifier: {product!r}",
                suggestion="Use registry product ids such as 'python' or 'nodejs'.",
            )
        if product not in products:
            products.append(product)
    return products


def parse_cycles(raw: str) -> dict[str, list[str]]:
    """Parse a JSON object mapping product ids to cycle ids.

    ``'{"python": ["3.11", "3.12"], "nodejs": [20]}'``. Integer cycle ids are
    converted to strings. An empty string means no filter.
    """
    if not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            f"Cycles input is not valid JSON: {exc.msg}",
            suggestion='Provide a JSON object, e.g. {"python": ["3.11", "3.12"]}.',
        ) from exc

    try:
        validated = _CYCLES_MAP.validate_python(decoded)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Cycles input must map product ids to lists of cycle ids",
            suggestion='Quote cycle ids that are not whole numbers, e.g. {"python": ["3.10"]}.',
            errors=exc.errors(include_url=False),
        ) from exc

    return {
        product.strip().lower(): [str(cycle) for cycle in cycles]
        for product, cycles in validated.items()
    }


def build_check_request(settings: CheckSettings) -> CheckRequest:
    """Validate the check settings as a whole."""
    products = parse_products(settings.products)
    if not products:
        raise ValidationError(
            "No products to check",
            suggestion="Set check.products, e.g. LIFECYCLE__CHECK__PRODUCTS=python,nodejs.",
        )

    cycles_map = parse_cycles(settings.cycles)
    unknown = sorted(set(cycles_map) - set(products))
    if unknown:
        raise ValidationError(
            f"Cycles given for products that are not checked: {', '.join(unknown)}",
            suggestion="Every key in check.cycles must also appear in check.products.",
        )

    version_map: dict[str, str] = {}
    version = settings.version.strip()
    if version:
        if len(products) != 1:
            raise ValidationError(
                "check.version requires exactly one product",
                suggestion="Check one product at a time when resolving an explicit version.",
            )
        if products[0] in cycles_map:
            raise ValidationError(
                "check.version and check.cycles cannot both target the same product",
                suggestion="Use either an explicit version or a cycle list.",
            )
        version_map[products[0]] = version

    return CheckRequest(
        products=products,
        cycles_map=cycles_map,
        version_map=version_map,
        semantic_fallback=settings.semantic_version_fallback,
    )
