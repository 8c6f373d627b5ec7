"""
Entry validation rules.

Business checks applied to a lifestyle entry after the request shape has
been accepted: activity type parsing, timestamp recency and the per-type
value ceiling. Every function here is pure apart from the ``now`` argument.
"""

from datetime import datetime
from typing import NamedTuple, Optional, Tuple

from models import LifestyleType
from validation import EmptyType, TimestampTooOld, UnknownType, ValueOutOfRange


class Ceiling(NamedTuple):
    limit: int
    unit: str


VALUE_CEILINGS = {
    LifestyleType.STEPS: Ceiling(100_000, "count"),
    LifestyleType.WATER: Ceiling(10_000, "ml"),
    LifestyleType.SLEEP: Ceiling(1_440, "minutes"),
    LifestyleType.JOGGING: Ceiling(720, "minutes"),
    LifestyleType.RUNNING: Ceiling(720, "minutes"),
    LifestyleType.MEDITATION: Ceiling(480, "minutes"),
}


def parse_lifestyle_type(raw: Optional[str]) -> LifestyleType:
    candidate = (raw or "").strip()
    if not candidate:
        raise EmptyType("Type cannot be empty")
    try:
        return LifestyleType(candidate.upper())
    except ValueError:
        valid = ", ".join(LifestyleType.names())
        raise UnknownType(f"Invalid lifestyle type: {raw}. Valid types are: {valid}")


def one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # 29 February has no counterpart in the previous year
        return moment.replace(year=moment.year - 1, day=28)


def validate_timestamp(timestamp: datetime, now: datetime) -> datetime:
    if timestamp < one_year_before(now):
        raise TimestampTooOld(
            f"Timestamp cannot be older than 1 year. Provided: {timestamp.isoformat()}"
        )
    return timestamp


def validate_value_for_type(entry_type: LifestyleType, value: float) -> float:
    ceiling = VALUE_CEILINGS[entry_type]
    if value > ceiling.limit:
        raise ValueOutOfRange(
            f"{entry_type.value} value cannot exceed {ceiling.limit:,} {ceiling.unit}. "
            f"Provided: {value}"
        )
    return value


def validate_entry(
    raw_type: Optional[str], value: float, timestamp: datetime, now: datetime
) -> Tuple[LifestyleType, float, datetime]:
    """Run type, timestamp and value checks in that order; the first failure wins."""
    entry_type = parse_lifestyle_type(raw_type)
    validate_timestamp(timestamp, now)
    validate_value_for_type(entry_type, value)
    return entry_type, float(value), timestamp
