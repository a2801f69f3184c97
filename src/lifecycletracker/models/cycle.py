from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _text_or_flag(value: Any) -> str | bool | None:
    if value is None or isinstance(value, (str, bool)):
        return value
    # Numbers and other shapes are kept as text; parse_lifecycle_field marks
    # them invalid instead of failing the whole record.
    return str(value)


class Cycle(BaseModel):
    """Single release cycle as returned by the lifecycle registry.

    Accepts the registry's camelCase field names. Immutable once validated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    cycle: str
    release_date: str | None = Field(default=None, alias="releaseDate")
    eol: str | bool | None = None
    latest: str | None = None
    link: str | None = None
    lts: str | bool | None = None
    support: str | bool | None = None
    discontinued: str | bool | None = None
    latest_release_date: str | None = Field(default=None, alias="latestReleaseDate")
    extended_support: str | bool | None = Field(default=None, alias="extendedSupport")

    @field_validator("cycle", mode="before")
    @classmethod
    def normalise_cycle(cls, v: Any) -> str:
        if v is None or isinstance(v, bool):
            raise ValueError("cycle must be a string or a number")
        return str(v)

    @field_validator("release_date", "latest", "link", "latest_release_date", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        return _optional_text(v)

    @field_validator("eol", "lts", "support", "discontinued", "extended_support", mode="before")
    @classmethod
    def coerce_text_or_flag(cls, v: Any) -> str | bool | None:
        return _text_or_flag(v)
