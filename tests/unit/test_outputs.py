"""Unit tests for lifecycletracker.outputs."""

from __future__ import annotations

import json
from typing import Any

import pytest

from lifecycletracker.analyzer import analyze_cycle, build_results
from lifecycletracker.models import ActionResults, Cycle
from lifecycletracker.outputs import (
    build_step_outputs,
    format_as_json,
    format_step_outputs,
    generate_matrix,
    generate_matrix_include,
)
from tests.conftest import TODAY


@pytest.fixture()
def results(nodejs_cycles: list[dict[str, Any]]) -> ActionResults:
    entries = [
        analyze_cycle("nodejs", Cycle.model_validate(c), today=TODAY, eol_threshold_days=90)
        for c in nodejs_cycles
    ]
    return build_results(entries, total_products=1, latest_versions={"nodejs": "22.14.0"})


class TestFormatAsJson:
    def test_camel_case_keys(self, results: ActionResults) -> None:
        decoded = json.loads(format_as_json(results))
        assert decoded["eolDetected"] is True
        assert decoded["approachingEol"] is True
        assert decoded["totalCyclesChecked"] == 3
        assert decoded["latestVersions"] == {"nodejs": "22.14.0"}
        assert decoded["products"][1]["daysUntilEol"] == 45
        assert decoded["products"][2]["rawData"]["cycle"] == "16"

    def test_round_trips_through_model(self, results: ActionResults) -> None:
        assert ActionResults.model_validate_json(format_as_json(results)) == results


class TestMatrix:
    def test_excludes_end_of_life_by_default(self, results: ActionResults) -> None:
        assert generate_matrix(results) == {"versions": ["22", "18"]}

    def test_exclude_approaching(self, results: ActionResults) -> None:
        assert generate_matrix(results, exclude_approaching_eol=True) == {"versions": ["22"]}

    def test_include_everything(self, results: ActionResults) -> None:
        assert generate_matrix(results, exclude_eol=False) == {"versions": ["22", "18", "16"]}

    def test_include_entries(self, results: ActionResults) -> None:
        matrix = generate_matrix_include(results)
        assert matrix["include"][1] == {
            "version": "18",
            "cycle": "18",
            "isLts": True,
            "eolDate": "2025-04-30",
            "status": "approaching_eol",
            "releaseDate": "2022-04-19",
        }
        assert len(matrix["include"]) == 2


class TestBuildStepOutputs:
    def test_every_value_is_a_string(self, results: ActionResults) -> None:
        outputs = build_step_outputs(results)
        assert all(isinstance(v, str) for v in outputs.values())
        assert set(outputs) == {
            "eol-detected",
            "approaching-eol",
            "results",
            "eol-products",
            "approaching-eol-products",
            "latest-versions",
            "summary",
            "total-products-checked",
            "total-cycles-checked",
            "stale-detected",
            "stale-products",
            "discontinued-detected",
            "discontinued-products",
            "extended-support-products",
            "matrix",
            "matrix-include",
        }

    def test_values(self, results: ActionResults) -> None:
        outputs = build_step_outputs(results)
        assert outputs["eol-detected"] == "true"
        assert outputs["stale-detected"] == "false"
        assert outputs["total-cycles-checked"] == "3"
        assert outputs["summary"] == results.summary
        assert [e["cycle"] for e in json.loads(outputs["eol-products"])] == ["16"]
        assert json.loads(outputs["matrix"]) == {"versions": ["22", "18"]}
        assert "\n" not in outputs["results"]


class TestFormatStepOutputs:
    def test_heredoc_blocks(self) -> None:
        text = format_step_outputs(
            {"eol-detected": "true", "summary": "line one\nline two"}, delimiter="EOF_X"
        )
        assert text == (
            "eol-detected<<EOF_X\ntrue\nEOF_X\n"
            "summary<<EOF_X\nline one\nline two\nEOF_X"
        )

    def test_random_delimiter(self, results: ActionResults) -> None:
        text = format_step_outputs(build_step_outputs(results))
        first_line = text.splitlines()[0]
        name, delimiter = first_line.split("<<")
        assert name == "eol-detected"
        assert delimiter.startswith("ghadelimiter_")
        assert text.count(f"<<{delimiter}") == 16

    def test_value_containing_delimiter_rejected(self) -> None:
        with pytest.raises(ValueError, match="summary"):
            format_step_outputs({"summary": "a\nEOF_X\nb"}, delimiter="EOF_X")
