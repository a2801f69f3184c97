"""Command entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Validate inputs before any network activity
- Own the httpx client for the duration of one check
- Print the JSON results (or CI step outputs) and map findings to an exit code
"""

from __future__ import annotations

import asyncio
import logging
import sys

import httpx
import pydantic
import structlog

from lifecycletracker import __version__
from lifecycletracker.analyzer import LifecycleAnalyzer
from lifecycletracker.client import RegistryClient, build_http_client
from lifecycletracker.config import Settings
from lifecycletracker.errors import ValidationError
from lifecycletracker.inputs import build_check_request
from lifecycletracker.models.results import ActionResults
from lifecycletracker.outputs import build_step_outputs, format_as_json, format_step_outputs

log = structlog.get_logger()

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_INVALID_INPUT = 2


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout is reserved for the JSON results
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Check
# ---------------------------------------------------------------------------


async def run_check(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> ActionResults:
    """Run one analysis.

    Inputs are validated first; ``ValidationError`` propagates before any
    request is made. When ``http_client`` is omitted, one is created and
    closed here.
    """
    request = build_check_request(settings.check)

    owns_client = http_client is None
    client = http_client if http_client is not None else build_http_client(settings.registry)
    try:
        registry = RegistryClient(
            client,
            base_url=settings.registry.url,
            cache_ttl=settings.cache.ttl_seconds,
        )
        analyzer = LifecycleAnalyzer(
            registry,
            settings.check.eol_threshold_days,
            stale_threshold_days=settings.check.stale_threshold_days,
            on_product_error=settings.check.on_product_error,
        )
        return await analyzer.analyze_products(
            request.products,
            cycles_map=request.cycles_map,
            version_map=request.version_map,
            semantic_fallback=request.semantic_fallback,
        )
    finally:
        if owns_client:
            await client.aclose()


def exit_code_for(results: ActionResults, settings: Settings) -> int:
    if settings.check.fail_on_eol and results.eol_detected:
        return EXIT_FINDINGS
    if settings.check.fail_on_approaching_eol and results.approaching_eol:
        return EXIT_FINDINGS
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    try:
        settings = Settings()
    except pydantic.ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT)

    setup_logging(settings)
    log.info("check_starting", version=__version__, registry=settings.registry.url)

    try:
        results = asyncio.run(run_check(settings))
    except ValidationError as exc:
        log.error("invalid_input", message=exc.message, suggestion=exc.suggestion)
        sys.exit(EXIT_INVALID_INPUT)

    if settings.output.format == "step-outputs":
        print(format_step_outputs(build_step_outputs(results)))
    else:
        print(format_as_json(results))
    log.info("check_complete", summary=results.summary)
    sys.exit(exit_code_for(results, settings))


if __name__ == "__main__":
    main()
