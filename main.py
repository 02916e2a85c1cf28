import logging
import os
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from adherence import (
    adherence_band,
    adherence_stats,
    can_advance_week,
    daily_adherence,
    days_in_range,
    end_of_week,
    is_future_week,
    most_missed,
    overall_adherence,
    start_of_week,
)
from calendar_view import (
    DoseAlreadyLogged,
    day_window,
    days_with_logs,
    is_logged,
    logs_on,
    medication_name,
    month_bounds,
    record_dose,
    scheduled_on,
)
from config import ANALYTICS_WINDOW_DAYS, CORS_ORIGINS, LOG_LEVEL, RECENT_LOGS_LIMIT, UPCOMING_LIMIT
from database import DatabaseUnavailable, create_document, db, delete_documents, get_documents, to_object_id
from schedule import next_due_times
from schemas import (
    Analytics,
    CalendarDay,
    Dashboard,
    DoseLogCreate,
    DoseLogOut,
    MedicationCreate,
    MedicationOut,
    RecentDoseLog,
    ScheduledMedication,
    UpcomingDose,
)

log = logging.getLogger("uvicorn.error")
log.setLevel(LOG_LEVEL)

app = FastAPI(title="Medication Tracker API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STORE_ERRORS = (PyMongoError, DatabaseUnavailable)


def current_user(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def _store_failure(action: str, e: Exception) -> HTTPException:
    log.error(f"Failed to {action}: {e}")
    return HTTPException(status_code=503, detail=f"Failed to {action}. Please try again.")


def _aware(value: datetime) -> datetime:
    # Naive datetimes from the client are local wall-clock time
    return value if value.tzinfo else value.astimezone()


def _medication_out(d: Dict[str, Any]) -> MedicationOut:
    d["id"] = str(d.pop("_id"))
    return MedicationOut(**d)


def _log_out(d: Dict[str, Any]) -> DoseLogOut:
    d["id"] = str(d.pop("_id"))
    return DoseLogOut(**d)


def load_medications(user_id: str) -> List[MedicationOut]:
    return [_medication_out(d) for d in get_documents("medication", {"user_id": user_id})]


def load_logs(user_id: str, since: Optional[datetime] = None, until: Optional[datetime] = None,
              medication_id: Optional[str] = None) -> List[DoseLogOut]:
    filt: Dict[str, Any] = {"user_id": user_id}
    if medication_id:
        filt["medication_id"] = medication_id
    window: Dict[str, Any] = {}
    if since:
        window["$gte"] = since
    if until:
        window["$lt"] = until
    if window:
        filt["timestamp"] = window
    return [_log_out(d) for d in get_documents("doselog", filt)]


def _recent_window_start() -> datetime:
    return datetime.now().astimezone() - timedelta(days=ANALYTICS_WINDOW_DAYS)


@app.get("/")
def read_root():
    return {"message": "Medication Tracker Backend Running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    if db is None:
        return response
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


# Medications

@app.post("/api/medications", response_model=dict)
def create_medication(payload: MedicationCreate, user_id: str = Depends(current_user)):
    doc = payload.model_dump()
    doc["start_date"] = _aware(payload.start_date)
    if payload.end_date:
        doc["end_date"] = _aware(payload.end_date)
    doc["user_id"] = user_id
    try:
        med_id = create_document("medication", doc)
    except STORE_ERRORS as e:
        raise _store_failure("add medication", e)
    log.info(f"Medication {med_id} added for user {user_id}")
    return {"id": med_id}


@app.get("/api/medications", response_model=List[MedicationOut])
def list_medications(user_id: str = Depends(current_user)):
    try:
        return load_medications(user_id)
    except STORE_ERRORS as e:
        raise _store_failure("fetch medications", e)


@app.delete("/api/medications/{medication_id}", response_model=dict)
def delete_medication(medication_id: str, user_id: str = Depends(current_user)):
    oid = to_object_id(medication_id)
    if oid is None:
        raise HTTPException(status_code=404, detail="Medication not found")
    try:
        deleted = delete_documents("medication", {"_id": oid, "user_id": user_id})
        if not deleted:
            raise HTTPException(status_code=404, detail="Medication not found")
        removed_logs = delete_documents("doselog", {"medication_id": medication_id, "user_id": user_id})
    except STORE_ERRORS as e:
        raise _store_failure("delete medication", e)
    return {"deleted": medication_id, "deleted_logs": removed_logs}


# Dose logs

@app.post("/api/dose-logs", response_model=DoseLogOut)
def log_dose(payload: DoseLogCreate, user_id: str = Depends(current_user)):
    oid = to_object_id(payload.medication_id)
    if oid is None:
        raise HTTPException(status_code=404, detail="Medication not found")
    now = datetime.now().astimezone()
    try:
        if not get_documents("medication", {"_id": oid, "user_id": user_id}):
            raise HTTPException(status_code=404, detail="Medication not found")
        start, end = day_window(now.date())
        todays = load_logs(user_id, since=start, until=end, medication_id=payload.medication_id)
        try:
            dose = record_dose(payload.medication_id, user_id, todays, at=now)
        except DoseAlreadyLogged as e:
            raise HTTPException(status_code=409, detail=str(e))
        log_id = create_document("doselog", dose)
    except STORE_ERRORS as e:
        raise _store_failure("log dose", e)
    return DoseLogOut(id=log_id, **dose.model_dump())


@app.get("/api/dose-logs/recent", response_model=List[RecentDoseLog])
def recent_dose_logs(user_id: str = Depends(current_user)):
    try:
        meds = load_medications(user_id)
        docs = get_documents("doselog", {"user_id": user_id}, limit=RECENT_LOGS_LIMIT,
                             sort="timestamp", descending=True)
    except STORE_ERRORS as e:
        raise _store_failure("fetch data", e)
    result: List[RecentDoseLog] = []
    for d in docs:
        entry = _log_out(d)
        result.append(RecentDoseLog(medication_name=medication_name(meds, entry.medication_id),
                                    **entry.model_dump()))
    return result


# Derived views

@app.get("/api/dashboard", response_model=Dashboard)
def dashboard(user_id: str = Depends(current_user)):
    try:
        meds = load_medications(user_id)
        logs = load_logs(user_id, since=_recent_window_start())
    except STORE_ERRORS as e:
        raise _store_failure("fetch dashboard data", e)
    stats = adherence_stats(meds, logs, top_n=3)
    upcoming = [
        UpcomingDose(medication=med, due_time=due)
        for med, due in next_due_times(meds, datetime.now(), UPCOMING_LIMIT)
    ]
    return Dashboard(stats=stats, band=adherence_band(stats.adherence_rate), upcoming=upcoming)


@app.get("/api/analytics", response_model=Analytics)
def analytics(week_start: Optional[date] = None, user_id: str = Depends(current_user)):
    today = date.today()
    if week_start is None:
        week_start = start_of_week(today)
    elif is_future_week(week_start, today):
        raise HTTPException(status_code=400, detail="Cannot view a future week")
    week_start = start_of_week(week_start)
    week_end = end_of_week(week_start)
    try:
        meds = load_medications(user_id)
        logs = load_logs(user_id, since=_recent_window_start())
    except STORE_ERRORS as e:
        raise _store_failure("fetch analytics data", e)
    return Analytics(
        overall_adherence=overall_adherence(logs),
        week_start=week_start.isoformat(),
        week_end=week_end.isoformat(),
        weekly=daily_adherence(logs, days_in_range(week_start, week_end)),
        most_missed=most_missed(meds, logs, top_n=5),
        can_advance=can_advance_week(week_start, today),
    )


@app.get("/api/calendar", response_model=CalendarDay)
def calendar_day(selected_date: Optional[date] = Query(None, alias="date"), user_id: str = Depends(current_user)):
    # Without a date the calendar opens on the current instant
    selected = selected_date if selected_date is not None else datetime.now()
    day = selected.date() if isinstance(selected, datetime) else selected
    first, last = month_bounds(day)
    try:
        meds = load_medications(user_id)
        logs = load_logs(user_id, since=day_window(first)[0], until=day_window(last)[1])
    except STORE_ERRORS as e:
        raise _store_failure("fetch calendar data", e)
    return CalendarDay(
        date=day.isoformat(),
        scheduled=[
            ScheduledMedication(medication=med, taken=is_logged(logs, med.id, day))
            for med in scheduled_on(meds, selected)
        ],
        logs=[
            RecentDoseLog(medication_name=medication_name(meds, entry.medication_id), **entry.model_dump())
            for entry in logs_on(logs, day)
        ],
        days_with_logs=[d.isoformat() for d in days_with_logs(logs, day.year, day.month)],
    )


if __name__ == "__main__":
    import uvicorn
    from config import PORT
    uvicorn.run(app, host="0.0.0.0", port=PORT)
