"""Shared test fixtures for the lifecycletracker test suite."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from lifecycletracker.cache import ResponseCache
from lifecycletracker.client import RegistryClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

BASE_URL = "https://registry.test/api"

# 45 days before nodejs 18's EOL (2025-04-30).
TODAY = date(2025, 3, 16)

PYTHON_CYCLES: list[dict[str, Any]] = [
    {
        "cycle": "3.12",
        "releaseDate": "2023-10-02",
        "eol": "2028-10-31",
        "latest": "3.12.9",
        "latestReleaseDate": "2025-02-04",
        "lts": False,
        "link": "https://www.python.org/downloads/release/python-3129/",
    },
    {
        "cycle": "3.11",
        "releaseDate": "2022-10-24",
        "eol": "2027-10-31",
        "latest": "3.11.11",
        "latestReleaseDate": "2024-12-03",
    },
    {
        "cycle": "3.9",
        "releaseDate": "2020-10-05",
        "eol": "2025-05-31",
        "latest": "3.9.21",
        "latestReleaseDate": "2024-12-03",
    },
    {
        "cycle": "3.7",
        "releaseDate": "2018-06-27",
        "eol": "2023-06-27",
        "latest": "3.7.17",
        "latestReleaseDate": "2023-06-06",
    },
]

NODEJS_CYCLES: list[dict[str, Any]] = [
    {
        "cycle": "22",
        "releaseDate": "2024-04-24",
        "eol": "2027-04-30",
        "latest": "22.14.0",
        "lts": "2024-10-29",
    },
    {
        "cycle": "18",
        "releaseDate": "2022-04-19",
        "eol": "2025-04-30",
        "latest": "18.20.7",
        "lts": "2022-10-25",
    },
    {
        "cycle": 16,
        "releaseDate": "2021-04-20",
        "eol": "2023-09-11",
        "latest": "16.20.2",
        "lts": True,
    },
]


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def python_cycles() -> list[dict[str, Any]]:
    return [dict(c) for c in PYTHON_CYCLES]


@pytest.fixture()
def nodejs_cycles() -> list[dict[str, Any]]:
    return [dict(c) for c in NODEJS_CYCLES]


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def registry_client(http_client: httpx.AsyncClient, clock: FakeClock) -> RegistryClient:
    """Client with a 60 second TTL driven by the fake clock."""
    return RegistryClient(
        http_client,
        base_url=BASE_URL,
        cache=ResponseCache(60, clock=clock),
    )
