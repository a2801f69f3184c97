"""Decoding of the registry's string-or-boolean lifecycle fields.

Upstream fields such as ``eol`` or ``support`` arrive as an ISO date, a
boolean, or nothing at all. ``parse_lifecycle_field`` turns every shape into
a ``LifecycleField`` tagged with its kind, so status logic never inspects raw
types. Parsing never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum

_TRUE_TOKENS = frozenset({"true", "yes"})
_FALSE_TOKENS = frozenset({"false", "no"})


class FieldKind(StrEnum):
    DATE = "date"
    FLAG = "flag"
    ABSENT = "absent"
    INVALID = "invalid"


@dataclass(frozen=True)
class LifecycleField:
    kind: FieldKind
    day: date | None = None
    flag: bool | None = None
    raw: str | None = None

    @property
    def iso_date(self) -> str | None:
        return self.day.isoformat() if self.day is not None else None


ABSENT = LifecycleField(kind=FieldKind.ABSENT)


def parse_iso_date(value: str) -> date | None:
    """Parse ``YYYY-MM-DD`` or a full ISO-8601 timestamp to a UTC calendar date."""
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.date()


def parse_lifecycle_field(value: object) -> LifecycleField:
    if value is None:
        return ABSENT
    if isinstance(value, bool):
        return LifecycleField(kind=FieldKind.FLAG, flag=value)
    if not isinstance(value, str):
        return LifecycleField(kind=FieldKind.INVALID, raw=str(value))

    text = value.strip()
    if not text:
        return ABSENT
    lowered = text.lower()
    if lowered in _TRUE_TOKENS:
        return LifecycleField(kind=FieldKind.FLAG, flag=True, raw=text)
    if lowered in _FALSE_TOKENS:
        return LifecycleField(kind=FieldKind.FLAG, flag=False, raw=text)

    parsed = parse_iso_date(text)
    if parsed is None:
        return LifecycleField(kind=FieldKind.INVALID, raw=text)
    return LifecycleField(kind=FieldKind.DATE, day=parsed, raw=text)
