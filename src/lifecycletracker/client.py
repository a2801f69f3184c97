"""Caching client for the lifecycle registry (endoflife.date compatible).

All registry I/O goes through a single RegistryClient. The client receives an
httpx.AsyncClient via constructor injection; the caller owns the client
lifecycle. Each cache miss issues exactly one request, with no retries.

Wire contract:
  GET {base}/                  → ["python", "nodejs", ...]
  GET {base}/{product}         → [Cycle, ...] (registry order preserved)
  GET {base}/{product}/{cycle} → Cycle

v1 catalogue endpoints (base URL ending in /api/v1):
  GET {base}/products/full                     → [ProductDetails, ...]
  GET {base}/products/{product}/releases/latest → Cycle
  GET {base}/categories, /tags, /identifiers    → [str, ...]
  GET {base}/categories/{c}, /tags/{t}         → [ProductSummary, ...]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from lifecycletracker import __version__
from lifecycletracker.cache import ResponseCache
from lifecycletracker.config import DEFAULT_REGISTRY_URL
from lifecycletracker.errors import ErrorCode, RegistryApiError
from lifecycletracker.models.cycle import Cycle
from lifecycletracker.models.product import ProductDetails, ProductSummary
from lifecycletracker.versions import clean_version, get_semantic_fallbacks

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from lifecycletracker.config import RegistrySettings
    from lifecycletracker.models.cache import CacheStats
    from lifecycletracker.protocols import CacheProtocol

log = structlog.get_logger()

T = TypeVar("T")

_STRING_LIST = TypeAdapter(list[str])
_PRODUCT_SUMMARIES = TypeAdapter(list[ProductSummary])
_PRODUCT_DETAILS = TypeAdapter(list[ProductDetails])
_TRANSIENT_STATUS_CODES = frozenset({408, 429})


def build_http_client(settings: RegistrySettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per run."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={
            "User-Agent": f"lifecycletracker/{__version__}",
            "Accept": "application/json",
        },
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def _decode_strings(payload: Any) -> list[str]:
    return _STRING_LIST.validate_python(payload)


def _decode_summaries(payload: Any) -> list[ProductSummary]:
    return _PRODUCT_SUMMARIES.validate_python(payload)


def _decode_details(payload: Any) -> list[ProductDetails]:
    return _PRODUCT_DETAILS.validate_python(payload)


def _decode_cycles(payload: Any, product: str) -> list[Cycle]:
    """Validate a cycle list record by record.

    A record that cannot be validated (e.g. no ``cycle``) is dropped and
    logged so one bad upstream entry does not hide the rest of the product.
    """
    if not isinstance(payload, list):
        raise ValueError(f"expected a list of cycles, got {type(payload).__name__}")

    cycles: list[Cycle] = []
    for index, record in enumerate(payload):
        try:
            cycles.append(Cycle.model_validate(record))
        except PydanticValidationError as exc:
            log.warning(
                "cycle_record_skipped",
                product=product,
                index=index,
                errors=exc.error_count(),
            )
    return cycles


def _decode_cycle(payload: Any, cycle: str) -> Cycle:
    # The single-cycle endpoint may omit the identifier that was requested.
    if isinstance(payload, dict) and "cycle" not in payload:
        payload = {"cycle": cycle, **payload}
    return Cycle.model_validate(payload)


def match_cycle(
    product: str,
    cycles: Sequence[Cycle],
    version: str,
    *,
    enable_fallback: bool = True,
) -> Cycle | None:
    """Pick the cycle that tracks ``version`` from an already fetched list.

    Candidates are tried most specific first (``1.2.3`` → ``1.2`` → ``1``) by
    exact string equality; only the cleaned version itself is tried when
    ``enable_fallback`` is False. The first cycle with a given id wins.
    """
    cleaned = clean_version(version)
    if not cleaned:
        return None

    candidates = get_semantic_fallbacks(cleaned) if enable_fallback else [cleaned]
    by_cycle: dict[str, Cycle] = {}
    for entry in cycles:
        by_cycle.setdefault(entry.cycle, entry)

    for candidate in candidates:
        match = by_cycle.get(candidate)
        if match is not None:
            log.info(
                "cycle_matched",
                product=product,
                version=version,
                cycle=candidate,
                exact=candidate == cleaned,
            )
            return match

    log.info("cycle_not_matched", product=product, version=version, candidates=candidates)
    return None


class RegistryClient:
    """Lifecycle registry client with a per-instance TTL cache."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str = DEFAULT_REGISTRY_URL,
        cache_ttl: float = 3600,
        cache: CacheProtocol | None = None,
    ) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._cache: CacheProtocol = cache if cache is not None else ResponseCache(cache_ttl)

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Registry endpoints
    # ------------------------------------------------------------------

    async def get_all_products(self) -> list[str]:
        return await self._request("/", _decode_strings)

    async def get_product_cycles(self, product: str) -> list[Cycle]:
        return await self._request(
            f"/{quote(product, safe='')}",
            lambda payload: _decode_cycles(payload, product),
            product=product,
        )

    async def get_product_cycle(self, product: str, cycle: str) -> Cycle:
        cycle = str(cycle)
        return await self._request(
            f"/{quote(product, safe='')}/{quote(cycle, safe='')}",
            lambda payload: _decode_cycle(payload, cycle),
            product=product,
            cycle=cycle,
        )

    async def get_cycle_info_with_fallback(
        self,
        product: str,
        version: str,
        enable_fallback: bool = True,
    ) -> Cycle | None:
        """Find the cycle that tracks ``version``.

        Fetches the product's cycle list (cached) and applies ``match_cycle``.
        Returns ``None`` when the product has no matching cycle. Registry
        failures still raise.
        """
        if not clean_version(version):
            log.warning("cycle_lookup_skipped", product=product, reason="empty_version")
            return None

        cycles = await self.get_product_cycles(product)
        return match_cycle(product, cycles, version, enable_fallback=enable_fallback)

    # ------------------------------------------------------------------
    # v1 catalogue endpoints
    # ------------------------------------------------------------------

    async def get_products_full_data(self) -> list[ProductDetails]:
        return await self._request("/products/full", _decode_details)

    async def get_latest_release(self, product: str) -> Cycle:
        return await self._request(
            f"/products/{quote(product, safe='')}/releases/latest",
            Cycle.model_validate,
            product=product,
        )

    async def get_categories(self) -> list[str]:
        return await self._request("/categories", _decode_strings)

    async def get_products_by_category(self, category: str) -> list[ProductSummary]:
        return await self._request(f"/categories/{quote(category, safe='')}", _decode_summaries)

    async def get_tags(self) -> list[str]:
        return await self._request("/tags", _decode_strings)

    async def get_products_by_tag(self, tag: str) -> list[ProductSummary]:
        return await self._request(f"/tags/{quote(tag, safe='')}", _decode_summaries)

    async def get_identifier_types(self) -> list[str]:
        return await self._request("/identifiers", _decode_strings)

    # ------------------------------------------------------------------
    # Cache control
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        path: str,
        decode: Callable[[Any], T],
        *,
        product: str | None = None,
        cycle: str | None = None,
    ) -> T:
        """Serve ``path`` from cache or fetch it once.

        The raw JSON payload is cached only after ``decode`` accepted it, and
        is decoded again on every hit so callers never share mutable state.
        """
        cached = self._cache.get(path)
        if cached is not None:
            log.debug("cache_hit", key=path)
            return decode(cached)

        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise RegistryApiError(
                code=ErrorCode.REGISTRY_UNREACHABLE,
                message=f"Timed out contacting the lifecycle registry at {url}",
                suggestion="Check registry access or raise registry.timeout_seconds.",
                product=product,
                cycle=cycle,
            ) from exc
        except httpx.HTTPError as exc:
            raise RegistryApiError(
                code=ErrorCode.REGISTRY_UNREACHABLE,
                message=f"Network error contacting the lifecycle registry at {url}: {exc}",
                suggestion="The registry may be temporarily unavailable.",
                product=product,
                cycle=cycle,
            ) from exc

        if not response.is_success:
            raise _error_for_status(url, response.status_code, product=product, cycle=cycle)

        try:
            payload = response.json()
            value = decode(payload)
        except ValueError as exc:
            log.warning("registry_invalid_response", url=url, error=str(exc))
            raise RegistryApiError(
                code=ErrorCode.INVALID_RESPONSE,
                message=f"Unexpected response shape from {url}",
                suggestion="The registry URL may not point to an endoflife.date compatible API.",
                status_code=response.status_code,
                product=product,
                cycle=cycle,
                recoverable=False,
            ) from exc

        log.info("registry_fetch_complete", url=url, status_code=response.status_code)
        self._cache.set(path, payload)
        return value


def _error_for_status(
    url: str,
    status_code: int,
    *,
    product: str | None,
    cycle: str | None,
) -> RegistryApiError:
    if status_code == 404 and cycle is not None:
        return RegistryApiError(
            code=ErrorCode.CYCLE_NOT_FOUND,
            message=f"Cycle '{cycle}' of '{product}' not found (HTTP 404)",
            suggestion="Check the cycle identifier against the product's release list.",
            status_code=status_code,
            product=product,
            cycle=cycle,
            recoverable=False,
        )
    if status_code == 404 and product is not None:
        return RegistryApiError(
            code=ErrorCode.PRODUCT_NOT_FOUND,
            message=f"Product '{product}' not found (HTTP 404)",
            suggestion="Use the registry's product identifier, e.g. 'nodejs' rather than 'node'.",
            status_code=status_code,
            product=product,
            cycle=cycle,
            recoverable=False,
        )
    return RegistryApiError(
        code=ErrorCode.REGISTRY_REQUEST_FAILED,
        message=f"HTTP {status_code} fetching {url}",
        suggestion="The registry may be temporarily unavailable.",
        status_code=status_code,
        product=product,
        cycle=cycle,
        recoverable=status_code >= 500 or status_code in _TRANSIENT_STATUS_CODES,
    )
