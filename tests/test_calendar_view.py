import unittest
from datetime import date, datetime

from calendar_view import (
    UNKNOWN_MEDICATION,
    DoseAlreadyLogged,
    days_with_logs,
    is_logged,
    logs_on,
    medication_name,
    month_bounds,
    new_dose_log,
    record_dose,
    scheduled_on,
)
from tests.helpers import make_log, make_med


class TestScheduledOn(unittest.TestCase):
    def setUp(self):
        self.ongoing = make_med("a", "Aspirin", start=datetime(2024, 1, 1))
        self.ended = make_med("b", "Brufen", start=datetime(2024, 1, 1), end=datetime(2024, 2, 1))
        self.later = make_med("c", "Cetirizine", start=datetime(2024, 4, 1))

    def test_filters_by_validity_window(self):
        result = scheduled_on([self.ongoing, self.ended, self.later], date(2024, 3, 1))
        self.assertEqual([m.id for m in result], ["a"])

    def test_compares_instants_not_days(self):
        starts_midday = make_med("d", "Doxycycline", start=datetime(2024, 3, 1, 12, 0))
        self.assertEqual(scheduled_on([starts_midday], date(2024, 3, 1)), [])
        self.assertEqual(len(scheduled_on([starts_midday], datetime(2024, 3, 1, 13, 0))), 1)

    def test_end_date_is_inclusive(self):
        self.assertEqual(len(scheduled_on([self.ended], date(2024, 2, 1))), 1)

    def test_empty(self):
        self.assertEqual(scheduled_on([], date(2024, 3, 1)), [])


class TestLogsOn(unittest.TestCase):
    def setUp(self):
        self.logs = [
            make_log("a", datetime(2024, 3, 1, 0, 0)),
            make_log("b", datetime(2024, 3, 1, 23, 59)),
            make_log("a", datetime(2024, 3, 2, 8, 0)),
        ]

    def test_logs_on_day(self):
        self.assertEqual(logs_on(self.logs, date(2024, 3, 1)), self.logs[:2])

    def test_is_logged_ignores_time_of_day(self):
        self.assertTrue(is_logged(self.logs, "b", date(2024, 3, 1)))
        self.assertTrue(is_logged(self.logs, "b", datetime(2024, 3, 1, 6, 0)))
        self.assertFalse(is_logged(self.logs, "b", date(2024, 3, 2)))
        self.assertFalse(is_logged([], "a", date(2024, 3, 1)))

    def test_days_with_logs(self):
        logs = self.logs + [make_log("a", datetime(2024, 4, 1, 8, 0))]
        self.assertEqual(days_with_logs(logs, 2024, 3), [date(2024, 3, 1), date(2024, 3, 2)])


class TestRecordDose(unittest.TestCase):
    def test_new_dose_log_is_on_time(self):
        log = new_dose_log("a", "user-1", datetime(2024, 3, 1, 9, 0))
        self.assertTrue(log.is_on_time)
        self.assertEqual(log.medication_id, "a")
        self.assertEqual(log.user_id, "user-1")

    def test_logged_dose_is_visible_the_same_day(self):
        at = datetime(2024, 3, 1, 21, 30)
        log = record_dose("a", "user-1", [], at=at)
        self.assertTrue(is_logged([log], "a", date(2024, 3, 1)))

    def test_second_dose_same_day_is_rejected(self):
        logs = [make_log("a", datetime(2024, 3, 1, 8, 0))]
        with self.assertRaises(DoseAlreadyLogged) as ctx:
            record_dose("a", "user-1", logs, at=datetime(2024, 3, 1, 20, 0))
        self.assertEqual(ctx.exception.day, date(2024, 3, 1))
        self.assertIn("already logged", str(ctx.exception))

    def test_other_medication_or_day_is_allowed(self):
        logs = [make_log("a", datetime(2024, 3, 1, 8, 0))]
        self.assertEqual(record_dose("b", "user-1", logs, at=datetime(2024, 3, 1, 20, 0)).medication_id, "b")
        self.assertEqual(record_dose("a", "user-1", logs, at=datetime(2024, 3, 2, 8, 0)).medication_id, "a")


class TestHelpers(unittest.TestCase):
    def test_month_bounds(self):
        self.assertEqual(month_bounds(date(2024, 2, 14)), (date(2024, 2, 1), date(2024, 2, 29)))
        self.assertEqual(month_bounds(date(2023, 12, 31)), (date(2023, 12, 1), date(2023, 12, 31)))

    def test_medication_name(self):
        meds = [make_med("a", "Aspirin")]
        self.assertEqual(medication_name(meds, "a"), "Aspirin")
        self.assertEqual(medication_name(meds, "gone"), UNKNOWN_MEDICATION)


if __name__ == "__main__":
    unittest.main()
