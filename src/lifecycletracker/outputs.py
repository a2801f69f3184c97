"""Machine-readable views of ``ActionResults``.

JSON for files and stdout, flat string outputs for CI steps, and build
matrices that list the cycles still worth testing against. Writing the values
anywhere is up to the caller: ``app.main`` prints either the JSON or the
step outputs, and CI wrappers can call these functions directly.
"""

from __future__ import annotations

import json
import secrets
from typing import TYPE_CHECKING, Any

from lifecycletracker.models.results import EolStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from lifecycletracker.models.results import ActionResults, ProductVersionInfo


def format_as_json(results: ActionResults, *, indent: int | None = 2) -> str:
    return results.model_dump_json(by_alias=True, indent=indent)


def _dump_entries(entries: list[ProductVersionInfo]) -> str:
    return json.dumps([e.model_dump(mode="json", by_alias=True) for e in entries])


def _matrix_candidates(
    results: ActionResults,
    *,
    exclude_eol: bool,
    exclude_approaching_eol: bool,
) -> list[ProductVersionInfo]:
    entries = results.products
    if exclude_eol:
        entries = [e for e in entries if e.status is not EolStatus.END_OF_LIFE]
    if exclude_approaching_eol:
        entries = [e for e in entries if e.status is not EolStatus.APPROACHING_EOL]
    return entries


def generate_matrix(
    results: ActionResults,
    exclude_eol: bool = True,
    exclude_approaching_eol: bool = False,
) -> dict[str, list[str]]:
    """``{"versions": [...]}`` for a CI build matrix."""
    entries = _matrix_candidates(
        results, exclude_eol=exclude_eol, exclude_approaching_eol=exclude_approaching_eol
    )
    return {"versions": [e.cycle for e in entries]}


def generate_matrix_include(
    results: ActionResults,
    exclude_eol: bool = True,
    exclude_approaching_eol: bool = False,
) -> dict[str, list[dict[str, Any]]]:
    """``{"include": [...]}`` matrix with lifecycle metadata per cycle."""
    entries = _matrix_candidates(
        results, exclude_eol=exclude_eol, exclude_approaching_eol=exclude_approaching_eol
    )
    return {
        "include": [
            {
                "version": e.cycle,
                "cycle": e.cycle,
                "isLts": e.is_lts,
                "eolDate": e.eol_date,
                "status": e.status.value,
                "releaseDate": e.release_date,
            }
            for e in entries
        ]
    }


def build_step_outputs(results: ActionResults) -> dict[str, str]:
    """Flatten results into CI step outputs (every value is a string)."""
    return {
        "eol-detected": json.dumps(results.eol_detected),
        "approaching-eol": json.dumps(results.approaching_eol),
        "results": format_as_json(results, indent=None),
        "eol-products": _dump_entries(results.eol_products),
        "approaching-eol-products": _dump_entries(results.approaching_eol_products),
        "latest-versions": json.dumps(results.latest_versions),
        "summary": results.summary,
        "total-products-checked": str(results.total_products_checked),
        "total-cycles-checked": str(results.total_cycles_checked),
        "stale-detected": json.dumps(results.stale_detected),
        "stale-products": _dump_entries(results.stale_products),
        "discontinued-detected": json.dumps(results.discontinued_detected),
        "discontinued-products": _dump_entries(results.discontinued_products),
        "extended-support-products": _dump_entries(results.extended_support_products),
        "matrix": json.dumps(generate_matrix(results)),
        "matrix-include": json.dumps(generate_matrix_include(results)),
    }


def format_step_outputs(outputs: Mapping[str, str], *, delimiter: str | None = None) -> str:
    """Render outputs in the multiline ``name<<DELIMITER`` form CI runners accept.

    The text can be appended verbatim to the file named by ``$GITHUB_OUTPUT``.
    A random delimiter is used unless one is given.
    """
    delimiter = delimiter or f"ghadelimiter_{secrets.token_hex(8)}"
    blocks = []
    for name, value in outputs.items():
        if delimiter in value:
            raise ValueError(f"output {name!r} contains the delimiter {delimiter!r}")
        blocks.append(f"{name}<<{delimiter}\n{value}\n{delimiter}")
    return "\n".join(blocks)
