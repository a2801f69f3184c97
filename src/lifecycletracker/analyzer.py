"""Lifecycle classification.

Turns registry cycles into ``ProductVersionInfo`` facts and aggregates them
into ``ActionResults``. The per-cycle functions are pure: status depends only
on the cycle, the thresholds and ``today``. ``LifecycleAnalyzer`` adds the
registry lookups and per-product failure isolation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Literal

import structlog

from lifecycletracker.client import match_cycle
from lifecycletracker.dates import FieldKind, LifecycleField, parse_lifecycle_field
from lifecycletracker.errors import RegistryApiError
from lifecycletracker.models.cycle import Cycle
from lifecycletracker.models.results import (
    ActionResults,
    EolStatus,
    ProductFailure,
    ProductVersionInfo,
)
from lifecycletracker.versions import clean_version

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from lifecycletracker.protocols import RegistryClientProtocol

log = structlog.get_logger()

DEFAULT_STALE_THRESHOLD_DAYS = 365

# Placeholder cycle id for a product whose cycles could not be fetched.
ALL_CYCLES = "*"

_LTS_FALSY_TOKENS = frozenset({"", "false", "0", "no", "none", "null"})

FailurePolicy = Literal["unknown", "omit"]


def utc_today() -> date:
    return datetime.now(UTC).date()


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def parse_eol_date(cycle: Cycle) -> LifecycleField:
    return parse_lifecycle_field(cycle.eol)


def parse_support_date(cycle: Cycle) -> LifecycleField:
    return parse_lifecycle_field(cycle.support)


def is_lts(value: str | bool | None) -> bool:
    """``True`` for ``lts: true`` or an LTS start date, ``False`` otherwise."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return value.strip().lower() not in _LTS_FALSY_TOKENS


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def calculate_days_until(target: date, today: date) -> int:
    """Whole calendar days from ``today`` to ``target``; negative once past."""
    return (target - today).days


def determine_eol_status(
    eol: LifecycleField,
    *,
    today: date,
    eol_threshold_days: int,
) -> tuple[EolStatus, int | None]:
    """Classify an ``eol`` field. Returns ``(status, days_until_eol)``.

    Precedence:
      1. flag true          → end_of_life, days unknown
      2. flag false/absent  → active
      3. date               → end_of_life if past, approaching_eol within
                              the threshold (inclusive), else active
      4. unparsable         → unknown
    """
    if eol.kind is FieldKind.FLAG:
        return (EolStatus.END_OF_LIFE if eol.flag else EolStatus.ACTIVE), None

    if eol.kind is FieldKind.ABSENT:
        return EolStatus.ACTIVE, None

    if eol.kind is FieldKind.DATE and eol.day is not None:
        days = calculate_days_until(eol.day, today)
        if days < 0:
            return EolStatus.END_OF_LIFE, days
        if days <= eol_threshold_days:
            return EolStatus.APPROACHING_EOL, days
        return EolStatus.ACTIVE, days

    return EolStatus.UNKNOWN, None


def analyze_cycle(
    product: str,
    cycle: Cycle,
    *,
    today: date,
    eol_threshold_days: int,
) -> ProductVersionInfo:
    """Build the lifecycle facts for one cycle. Never raises on bad field data."""
    eol = parse_eol_date(cycle)
    status, days_until_eol = determine_eol_status(
        eol, today=today, eol_threshold_days=eol_threshold_days
    )

    support = parse_support_date(cycle)
    discontinued = parse_lifecycle_field(cycle.discontinued)
    extended = parse_lifecycle_field(cycle.extended_support)
    latest_release = parse_lifecycle_field(cycle.latest_release_date)

    is_discontinued = bool(discontinued.flag) or (
        discontinued.day is not None and discontinued.day <= today
    )
    has_extended_support = bool(extended.flag) or (
        extended.day is not None and extended.day >= today
    )
    days_since_latest_release = (
        -calculate_days_until(latest_release.day, today)
        if latest_release.day is not None
        else None
    )

    return ProductVersionInfo(
        product=product,
        cycle=cycle.cycle,
        status=status,
        eol_date=eol.iso_date,
        days_until_eol=days_until_eol,
        release_date=cycle.release_date,
        latest_version=cycle.latest,
        is_lts=is_lts(cycle.lts),
        support_date=support.iso_date,
        link=cycle.link,
        discontinued_date=discontinued.iso_date,
        is_discontinued=is_discontinued,
        extended_support_date=extended.iso_date,
        has_extended_support=has_extended_support,
        latest_release_date=latest_release.iso_date,
        days_since_latest_release=days_since_latest_release,
        raw_data=cycle,
    )


def is_stale(info: ProductVersionInfo, stale_threshold_days: int) -> bool:
    """A supported cycle with no release for longer than the threshold."""
    if info.status is EolStatus.END_OF_LIFE or info.days_since_latest_release is None:
        return False
    return info.days_since_latest_release > stale_threshold_days


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def generate_summary(
    *,
    total_products: int,
    total_cycles: int,
    eol_count: int,
    approaching_count: int,
    stale_count: int = 0,
    failed_count: int = 0,
) -> str:
    """Human-readable one-liner built only from counts."""
    scope = f"{total_cycles} cycle(s) across {total_products} product(s)"
    findings: list[str] = []
    if eol_count:
        findings.append(f"{eol_count} end-of-life")
    if approaching_count:
        findings.append(f"{approaching_count} approaching end-of-life")
    if stale_count:
        findings.append(f"{stale_count} stale")

    if findings:
        summary = f"Checked {scope}: " + ", ".join(findings) + "."
    else:
        summary = f"Checked {scope}: all actively supported."
    if failed_count:
        summary += f" {failed_count} product(s) could not be checked."
    return summary


def build_results(
    entries: Sequence[ProductVersionInfo],
    *,
    total_products: int,
    latest_versions: Mapping[str, str],
    failures: Sequence[ProductFailure] = (),
    stale_threshold_days: int = DEFAULT_STALE_THRESHOLD_DAYS,
) -> ActionResults:
    products = list(entries)
    eol = [p for p in products if p.status is EolStatus.END_OF_LIFE]
    approaching = [p for p in products if p.status is EolStatus.APPROACHING_EOL]
    stale = [p for p in products if is_stale(p, stale_threshold_days)]
    discontinued = [p for p in products if p.is_discontinued]
    extended = [p for p in products if p.has_extended_support]

    return ActionResults(
        eol_detected=bool(eol),
        approaching_eol=bool(approaching),
        stale_detected=bool(stale),
        discontinued_detected=bool(discontinued),
        total_products_checked=total_products,
        total_cycles_checked=len(products),
        products=products,
        eol_products=eol,
        approaching_eol_products=approaching,
        stale_products=stale,
        discontinued_products=discontinued,
        extended_support_products=extended,
        latest_versions=dict(latest_versions),
        failures=list(failures),
        summary=generate_summary(
            total_products=total_products,
            total_cycles=len(products),
            eol_count=len(eol),
            approaching_count=len(approaching),
            stale_count=len(stale),
            failed_count=len(failures),
        ),
    )


@dataclass
class _ProductOutcome:
    entries: list[ProductVersionInfo]
    latest_version: str | None = None
    failure: ProductFailure | None = None


class LifecycleAnalyzer:
    """Classifies registry cycles for one run.

    ``today`` is resolved once per call to ``analyze_products`` so every entry
    in an aggregate is measured against the same day.
    """

    def __init__(
        self,
        client: RegistryClientProtocol,
        eol_threshold_days: int,
        *,
        stale_threshold_days: int = DEFAULT_STALE_THRESHOLD_DAYS,
        on_product_error: FailurePolicy = "unknown",
        today: Callable[[], date] = utc_today,
    ) -> None:
        if eol_threshold_days < 0:
            raise ValueError(f"eol_threshold_days must be >= 0, got {eol_threshold_days}")
        self._client = client
        self._eol_threshold_days = eol_threshold_days
        self._stale_threshold_days = stale_threshold_days
        self._on_product_error = on_product_error
        self._today = today

    def analyze_product_cycle(
        self,
        product: str,
        cycle: Cycle,
        *,
        today: date | None = None,
    ) -> ProductVersionInfo:
        return analyze_cycle(
            product,
            cycle,
            today=today or self._today(),
            eol_threshold_days=self._eol_threshold_days,
        )

    async def analyze_product(
        self,
        product: str,
        cycles: Sequence[str] | None = None,
        *,
        today: date | None = None,
    ) -> list[ProductVersionInfo]:
        """Classify a product's cycles, optionally only the requested ones.

        Requested ids missing from the registry are skipped with a warning.
        Registry order is preserved. Registry errors propagate.
        """
        all_cycles = await self._client.get_product_cycles(product)
        return self._classify(product, all_cycles, cycles, today=today or self._today())

    def _classify(
        self,
        product: str,
        all_cycles: Sequence[Cycle],
        cycles: Sequence[str] | None,
        *,
        today: date,
    ) -> list[ProductVersionInfo]:
        selected = list(all_cycles)
        if cycles:
            wanted = {str(c) for c in cycles}
            selected = [c for c in all_cycles if c.cycle in wanted]
            missing = sorted(wanted - {c.cycle for c in selected})
            if missing:
                log.warning("cycles_not_found", product=product, cycles=missing)

        return [self.analyze_product_cycle(product, c, today=today) for c in selected]

    def _classify_version(
        self,
        product: str,
        all_cycles: Sequence[Cycle],
        version: str,
        *,
        semantic_fallback: bool,
        today: date,
    ) -> list[ProductVersionInfo]:
        cycle = match_cycle(product, all_cycles, version, enable_fallback=semantic_fallback)
        if cycle is None:
            log.warning("version_not_tracked", product=product, version=version)
            return []
        return [self.analyze_product_cycle(product, cycle, today=today)]

    async def analyze_products(
        self,
        products: Sequence[str],
        cycles_map: Mapping[str, Sequence[str]] | None = None,
        version_map: Mapping[str, str] | None = None,
        semantic_fallback: bool = False,
    ) -> ActionResults:
        """Analyze several products concurrently and aggregate the results.

        A product listed in ``version_map`` is matched with the client's fallback
        rules (``match_cycle``) instead of filtered by ``cycles_map``. Each
        product costs one registry request. A registry error for one
        product is recorded in ``failures`` and never aborts the others.
        """
        today = self._today()
        cycles_map = cycles_map or {}
        version_map = version_map or {}

        outcomes = await asyncio.gather(
            *(
                self._analyze_one(
                    product,
                    cycles=cycles_map.get(product),
                    version=version_map.get(product),
                    semantic_fallback=semantic_fallback,
                    today=today,
                )
                for product in products
            )
        )

        entries: list[ProductVersionInfo] = []
        latest_versions: dict[str, str] = {}
        failures: list[ProductFailure] = []
        for product, outcome in zip(products, outcomes, strict=True):
            entries.extend(outcome.entries)
            if outcome.latest_version:
                latest_versions[product] = outcome.latest_version
            if outcome.failure is not None:
                failures.append(outcome.failure)

        results = build_results(
            entries,
            total_products=len(products),
            latest_versions=latest_versions,
            failures=failures,
            stale_threshold_days=self._stale_threshold_days,
        )
        log.info(
            "analysis_complete",
            products=results.total_products_checked,
            cycles=results.total_cycles_checked,
            eol=len(results.eol_products),
            approaching_eol=len(results.approaching_eol_products),
            failures=len(failures),
        )
        return results

    async def _analyze_one(
        self,
        product: str,
        *,
        cycles: Sequence[str] | None,
        version: str | None,
        semantic_fallback: bool,
        today: date,
    ) -> _ProductOutcome:
        # One registry fetch per product; everything below works on this list.
        try:
            all_cycles = await self._client.get_product_cycles(product)
        except RegistryApiError as exc:
            log.warning(
                "product_analysis_failed",
                product=product,
                code=exc.code,
                status_code=exc.status_code,
                message=exc.message,
            )
            return self._failed_outcome(product, exc, cycles=cycles, version=version)

        if version is not None:
            entries = self._classify_version(
                product,
                all_cycles,
                version,
                semantic_fallback=semantic_fallback,
                today=today,
            )
        else:
            entries = self._classify(product, all_cycles, cycles, today=today)

        latest_version = all_cycles[0].latest if all_cycles else None
        return _ProductOutcome(entries=entries, latest_version=latest_version)

    def _failed_outcome(
        self,
        product: str,
        exc: RegistryApiError,
        *,
        cycles: Sequence[str] | None,
        version: str | None,
    ) -> _ProductOutcome:
        failure = ProductFailure(
            product=product,
            message=exc.message,
            code=str(exc.code),
            status_code=exc.status_code,
        )
        if self._on_product_error == "omit":
            return _ProductOutcome(entries=[], failure=failure)

        if version is not None:
            cycle_ids = [clean_version(version) or ALL_CYCLES]
        elif cycles:
            cycle_ids = [str(c) for c in cycles]
        else:
            cycle_ids = [ALL_CYCLES]

        entries = [
            ProductVersionInfo(
                product=product,
                cycle=cycle_id,
                status=EolStatus.UNKNOWN,
                raw_data=Cycle(cycle=cycle_id),
            )
            for cycle_id in cycle_ids
        ]
        return _ProductOutcome(entries=entries, failure=failure)
