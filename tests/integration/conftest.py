"""Integration test fixtures.

Registry payloads here are dated relative to the current UTC day because
``run_check`` measures against the real clock.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

import pytest

from lifecycletracker.analyzer import utc_today
from lifecycletracker.config import CheckSettings, RegistrySettings, Settings
from tests.conftest import BASE_URL

if TYPE_CHECKING:
    from collections.abc import Callable


def _days_from_today(days: int) -> str:
    return (utc_today() + timedelta(days=days)).isoformat()


@pytest.fixture()
def widget_cycles() -> list[dict[str, Any]]:
    """One active, one approaching (30 days) and one end-of-life cycle."""
    return [
        {
            "cycle": "3",
            "releaseDate": _days_from_today(-200),
            "eol": _days_from_today(400),
            "latest": "3.1.0",
            "latestReleaseDate": _days_from_today(-10),
            "lts": True,
        },
        {
            "cycle": "2",
            "releaseDate": _days_from_today(-900),
            "eol": _days_from_today(30),
            "latest": "2.9.4",
        },
        {
            "cycle": "1",
            "releaseDate": _days_from_today(-1500),
            "eol": _days_from_today(-30),
            "latest": "1.8.0",
        },
    ]


@pytest.fixture()
def make_settings() -> Callable[..., Settings]:
    """Build Settings pointing at the mocked registry."""

    def _make(**check: Any) -> Settings:
        return Settings(
            registry=RegistrySettings(url=BASE_URL),
            check=CheckSettings(**check),
        )

    return _make
