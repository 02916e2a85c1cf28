from datetime import datetime

from schemas import DoseLog, MedicationOut


def make_med(med_id="m1", name="Lisinopril", times=("08:00",), start=datetime(2024, 1, 1), end=None,
             frequency="once_daily"):
    return MedicationOut(
        id=med_id,
        name=name,
        dose="10mg",
        frequency=frequency,
        times=list(times),
        start_date=start,
        end_date=end,
        user_id="user-1",
    )


def make_log(med_id, timestamp, on_time=True):
    return DoseLog(medication_id=med_id, timestamp=timestamp, is_on_time=on_time, user_id="user-1")
