"""
What was scheduled and what was taken on a given calendar day.
"""
import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from adherence import log_day
from schedule import as_instant, is_active_at, to_local
from schemas import DoseLog, MedicationOut

logger = logging.getLogger(__name__)

UNKNOWN_MEDICATION = "Unknown Medication"


class DoseAlreadyLogged(Exception):
    """A dose for this medication was already recorded on that day."""

    def __init__(self, medication_id: str, day: date):
        self.medication_id = medication_id
        self.day = day
        super().__init__("You've already logged this medication today")


def scheduled_on(medications: Iterable[MedicationOut], day) -> List[MedicationOut]:
    """Medications active at `day`.

    `day` may be a date (local midnight) or a datetime; the comparison is
    against the start and end instants, not whole calendar days.
    """
    instant = as_instant(day)
    return [med for med in medications if is_active_at(med, instant)]


def _calendar_day(day) -> date:
    if isinstance(day, datetime):
        return to_local(day).date()
    return day


def logs_on(logs: Iterable[DoseLog], day) -> List[DoseLog]:
    target = _calendar_day(day)
    return [log for log in logs if log_day(log) == target]


def is_logged(logs: Iterable[DoseLog], medication_id: str, day) -> bool:
    return any(log.medication_id == medication_id for log in logs_on(logs, day))


def days_with_logs(logs: Iterable[DoseLog], year: int, month: int) -> List[date]:
    days: Set[date] = {log_day(log) for log in logs}
    return sorted(d for d in days if d.year == year and d.month == month)


def month_bounds(day: date) -> Tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def medication_name(medications: Iterable[MedicationOut], medication_id: str) -> str:
    for med in medications:
        if med.id == medication_id:
            return med.name
    return UNKNOWN_MEDICATION


def new_dose_log(medication_id: str, user_id: str, at: datetime) -> DoseLog:
    """Build an unsaved dose log. Doses are always recorded as on time."""
    return DoseLog(medication_id=medication_id, timestamp=at, is_on_time=True, user_id=user_id)


def record_dose(medication_id: str, user_id: str, logs: Sequence[DoseLog], at: Optional[datetime] = None) -> DoseLog:
    """Build the dose log for taking `medication_id` at `at`.

    Raises DoseAlreadyLogged if `logs` already hold a dose for the same
    medication on that calendar day.
    """
    if at is None:
        at = datetime.now().astimezone()
    if is_logged(logs, medication_id, at):
        logger.info("dose for medication %s already logged on %s", medication_id, _calendar_day(at))
        raise DoseAlreadyLogged(medication_id, _calendar_day(at))
    return new_dose_log(medication_id, user_id, at)


def day_window(day: date) -> Tuple[datetime, datetime]:
    """Local [start, end) instants covering one calendar day."""
    start = datetime.combine(day, datetime.min.time())
    return start.astimezone(), (start + timedelta(days=1)).astimezone()
