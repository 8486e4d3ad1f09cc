"""Tagged instants and the single local/UTC normalization rule.

Charts display local time while samples are stored in UTC. A ``datetime``
without ``tzinfo`` carries no zone information; such values are treated as
already being in the local display zone and are never shifted. Aware values
are converted to the local zone before they are shown or compared to "now".
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

Clock = Callable[[], datetime]


class InstantKind(Enum):
    LOCAL = "local"
    UTC = "utc"
    UNSPECIFIED = "unspecified"


def instant_kind(value: datetime) -> InstantKind:
    if value.tzinfo is None or value.utcoffset() is None:
        return InstantKind.UNSPECIFIED
    if value.utcoffset() == timedelta(0) and value.tzinfo is timezone.utc:
        return InstantKind.UTC
    return InstantKind.LOCAL


def to_local(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime in the local zone."""

    # astimezone() interprets naive values as local wall time
    return value.astimezone()


def to_utc(value: datetime) -> datetime:
    return to_local(value).astimezone(timezone.utc)


def local_now() -> datetime:
    return datetime.now().astimezone()


def from_timestamp(seconds: float) -> datetime:
    """Local aware datetime for epoch seconds (the chart x-axis unit)."""

    return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone()


@dataclass(frozen=True, slots=True)
class Instant:
    """A datetime together with how its zone should be interpreted."""

    value: datetime
    kind: InstantKind

    @classmethod
    def of(cls, value: datetime) -> "Instant":
        return cls(value, instant_kind(value))

    def to_local(self) -> datetime:
        return to_local(self.value)

    def to_utc(self) -> datetime:
        return to_utc(self.value)

    def timestamp(self) -> float:
        return self.to_local().timestamp()


__all__ = [
    "Clock",
    "Instant",
    "InstantKind",
    "instant_kind",
    "to_local",
    "to_utc",
    "local_now",
    "from_timestamp",
]
