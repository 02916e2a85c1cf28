"""
Upcoming-dose projection.

Medication times are wall-clock "HH:MM" strings with no timezone, so every
instant handled here is first brought to naive local time.
"""
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from schemas import Medication


def to_local(value: datetime) -> datetime:
    """Return `value` as a naive datetime in the server's local timezone.

    Naive values are assumed to already be local.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def as_instant(value) -> datetime:
    # A bare date stands for local midnight
    if isinstance(value, datetime):
        return to_local(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def parse_time(value: str) -> Tuple[int, int]:
    """Split an "HH:MM" string into (hour, minute).

    Raises ValueError for anything else; stored times are expected to be
    well formed.
    """
    hours, sep, minutes = value.partition(":")
    if not sep:
        raise ValueError(f"malformed time of day: {value!r}")
    return int(hours), int(minutes)


def is_active_at(medication: Medication, instant: datetime) -> bool:
    """Start and end dates are inclusive instants, not calendar days."""
    start = to_local(medication.start_date)
    end: Optional[datetime] = to_local(medication.end_date) if medication.end_date else None
    return start <= instant and (end is None or end >= instant)


def project_times(medication: Medication, now: datetime) -> List[datetime]:
    """Next occurrence of each of the medication's times, today or tomorrow."""
    due: List[datetime] = []
    for t in medication.times:
        hour, minute = parse_time(t)
        candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if candidate < now:
            candidate += timedelta(days=1)
        due.append(candidate)
    return due


def next_due_times(medications: Iterable[Medication], now: datetime, limit: int = 3) -> List[Tuple[Medication, datetime]]:
    """Return the `limit` soonest (medication, due time) pairs.

    Only medications active at `now` are projected. Ties keep input order.
    """
    now = to_local(now)
    upcoming: List[Tuple[Medication, datetime]] = []
    for med in medications:
        if not is_active_at(med, now):
            continue
        upcoming.extend((med, due) for due in project_times(med, now))
    upcoming.sort(key=lambda item: item[1])
    return upcoming[:limit]
