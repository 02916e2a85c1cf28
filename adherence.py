"""
Adherence statistics computed from dose logs.

Everything here is recomputed from the raw collections on each call.
"""
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Sequence

from schedule import to_local
from schemas import AdherenceStat, DoseLog, MedicationOut, MissedMedication, WeeklyAdherence


def percent(part: int, whole: int) -> int:
    """100 * part / whole rounded half up, 0 when whole is 0."""
    if whole == 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def overall_adherence(logs: Sequence[DoseLog]) -> int:
    taken = sum(1 for log in logs if log.is_on_time)
    return percent(taken, len(logs))


def most_missed(medications: Iterable[MedicationOut], logs: Sequence[DoseLog], top_n: int = 3) -> List[MissedMedication]:
    """Medications ranked by number of doses not taken on time.

    Medications are matched to logs by their `id` attribute. Medications
    with no missed doses are left out.
    """
    missed: Dict[str, int] = {}
    for log in logs:
        if not log.is_on_time:
            missed[log.medication_id] = missed.get(log.medication_id, 0) + 1

    ranked = [
        MissedMedication(medication=med.name, count=missed[med.id])
        for med in medications
        if missed.get(med.id, 0) > 0
    ]
    ranked.sort(key=lambda m: m.count, reverse=True)
    return ranked[:top_n]


def adherence_stats(medications: Iterable[MedicationOut], logs: Sequence[DoseLog], top_n: int = 3) -> AdherenceStat:
    taken = sum(1 for log in logs if log.is_on_time)
    return AdherenceStat(
        adherence_rate=overall_adherence(logs),
        total_doses=len(logs),
        taken_doses=taken,
        missed_doses=len(logs) - taken,
        most_missed=most_missed(medications, logs, top_n),
    )


def adherence_band(rate: int) -> str:
    if rate >= 80:
        return "good"
    if rate >= 50:
        return "fair"
    return "poor"


def log_day(log: DoseLog) -> date:
    return to_local(log.timestamp).date()


def day_label(day: date) -> str:
    # e.g. "Mar 1"
    return f"{day:%b} {day.day}"


def daily_adherence(logs: Sequence[DoseLog], days: Iterable[date]) -> List[WeeklyAdherence]:
    """One bucket per requested day, including days without any logs."""
    by_day: Dict[date, List[DoseLog]] = {}
    for log in logs:
        by_day.setdefault(log_day(log), []).append(log)

    buckets = []
    for day in days:
        day_logs = by_day.get(day, [])
        taken = sum(1 for log in day_logs if log.is_on_time)
        buckets.append(
            WeeklyAdherence(
                date=day_label(day),
                adherence_rate=percent(taken, len(day_logs)),
                total=len(day_logs),
                taken=taken,
            )
        )
    return buckets


# Week arithmetic. Weeks run Sunday to Saturday.

def start_of_week(day: date) -> date:
    if isinstance(day, datetime):
        day = to_local(day).date()
    # weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def end_of_week(day: date) -> date:
    return start_of_week(day) + timedelta(days=6)


def days_in_range(start: date, end: date) -> List[date]:
    """Inclusive list of calendar days from start to end."""
    if end < start:
        return []
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def previous_week(week_start: date) -> date:
    return week_start - timedelta(weeks=1)


def can_advance_week(week_start: date, today: date) -> bool:
    """Whether paging forward from `week_start` stays within the current week."""
    return week_start + timedelta(weeks=1) <= start_of_week(today)


def is_future_week(week_start: date, today: date) -> bool:
    return start_of_week(week_start) > start_of_week(today)
