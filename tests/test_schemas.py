import unittest
from datetime import datetime

from pydantic import ValidationError

from schemas import DEFAULT_TIMES, MedicationCreate, MedicationOut


def create(**overrides):
    data = {"name": "Lisinopril", "dose": "10mg", "startDate": "2024-01-01T00:00:00"}
    data.update(overrides)
    return MedicationCreate(**data)


class TestMedicationCreate(unittest.TestCase):
    def test_frequency_fills_default_times(self):
        for frequency, times in DEFAULT_TIMES.items():
            self.assertEqual(create(frequency=frequency).times, times)

    def test_explicit_times_are_kept_and_deduplicated(self):
        med = create(frequency="custom", times=["09:30", "21:00", "09:30"])
        self.assertEqual(med.times, ["09:30", "21:00"])

    def test_custom_requires_a_time(self):
        with self.assertRaises(ValidationError):
            create(frequency="custom")

    def test_rejects_malformed_times(self):
        for bad in ("9am", "25:00", "08:60", "0800"):
            with self.assertRaises(ValidationError):
                create(times=[bad])

    def test_rejects_short_name_and_empty_dose(self):
        with self.assertRaises(ValidationError):
            create(name="A")
        with self.assertRaises(ValidationError):
            create(dose="")

    def test_rejects_end_before_start(self):
        with self.assertRaises(ValidationError):
            create(endDate="2023-12-31T00:00:00")

    def test_default_category(self):
        self.assertEqual(create().category, "prescription")
        with self.assertRaises(ValidationError):
            create(category="candy")


class TestMedicationOut(unittest.TestCase):
    def test_reads_snake_case_and_serializes_camel_case(self):
        med = MedicationOut(
            id="m1", name="Lisinopril", dose="10mg", frequency="once_daily", times=["08:00"],
            start_date=datetime(2024, 1, 1), family_member="Mum", user_id="user-1",
        )
        dumped = med.model_dump(by_alias=True)
        self.assertEqual(dumped["startDate"], datetime(2024, 1, 1))
        self.assertEqual(dumped["familyMember"], "Mum")
        self.assertIsNone(dumped["endDate"])
        self.assertEqual(dumped["userId"], "user-1")


if __name__ == "__main__":
    unittest.main()
