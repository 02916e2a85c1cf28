"""
Database Schemas for the Medication Tracker

Each Pydantic model for a stored record represents a MongoDB collection. The
collection name is the lowercase class name (e.g., Medication -> "medication",
DoseLog -> "doselog"). Records are stored with snake_case keys and served to
the frontend with camelCase keys.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

FrequencyType = Literal["once_daily", "twice_daily", "three_times_daily", "four_times_daily", "custom"]
CategoryType = Literal["prescription", "over_the_counter", "supplement", "vitamin", "other"]

DEFAULT_TIMES: Dict[str, List[str]] = {
    "once_daily": ["08:00"],
    "twice_daily": ["08:00", "20:00"],
    "three_times_daily": ["08:00", "14:00", "20:00"],
    "four_times_daily": ["08:00", "12:00", "16:00", "20:00"],
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Medication(CamelModel):
    """A medication a user takes.
    Collection: medication
    """
    name: str = Field(..., description="Medication name")
    dose: str = Field(..., description="Free-text dose, e.g. '10mg'")
    frequency: FrequencyType = Field("once_daily", description="Daily dosing cadence")
    times: List[str] = Field(default_factory=list, description="Scheduled times in HH:MM 24h local format")
    start_date: datetime = Field(..., description="First day the medication is taken (inclusive)")
    end_date: Optional[datetime] = Field(None, description="Last day the medication is taken (inclusive)")
    category: Optional[str] = Field(None, description="Category tag")
    family_member: Optional[str] = Field(None, description="Family member this medication belongs to")
    user_id: str = Field(..., description="Owning user")
    created_at: Optional[datetime] = Field(None, description="When the record was created")


class DoseLog(CamelModel):
    """One recorded dose.
    Collection: doselog
    """
    medication_id: str = Field(..., description="ID of the medication document")
    timestamp: datetime = Field(..., description="When the dose was recorded")
    is_on_time: bool = Field(True, description="Whether the dose was taken as scheduled")
    user_id: str = Field(..., description="Owning user")


# Request bodies

class MedicationCreate(CamelModel):
    name: str = Field(..., min_length=2, description="Medication name")
    dose: str = Field(..., min_length=1)
    frequency: FrequencyType = "once_daily"
    times: List[str] = Field(default_factory=list)
    start_date: datetime
    end_date: Optional[datetime] = None
    category: Optional[CategoryType] = "prescription"
    family_member: Optional[str] = None

    @field_validator("times")
    @classmethod
    def check_times(cls, v: List[str]) -> List[str]:
        seen: List[str] = []
        for t in v:
            hours, _, minutes = t.partition(":")
            if len(minutes) != 2 or not (hours.isdigit() and minutes.isdigit()):
                raise ValueError(f"time {t!r} is not in HH:MM format")
            if int(hours) > 23 or int(minutes) > 59:
                raise ValueError(f"time {t!r} is out of range")
            if t not in seen:
                seen.append(t)
        return seen

    @model_validator(mode="after")
    def fill_default_times(self):
        if not self.times:
            if self.frequency == "custom":
                raise ValueError("Please add at least one time for your medication")
            self.times = list(DEFAULT_TIMES[self.frequency])
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end date must not be before start date")
        return self


class DoseLogCreate(CamelModel):
    medication_id: str


# Response models

class MedicationOut(Medication):
    id: str


class DoseLogOut(DoseLog):
    id: str


class RecentDoseLog(DoseLogOut):
    medication_name: str


class MissedMedication(CamelModel):
    medication: str
    count: int


class AdherenceStat(CamelModel):
    adherence_rate: int = 0
    total_doses: int = 0
    taken_doses: int = 0
    missed_doses: int = 0
    most_missed: List[MissedMedication] = Field(default_factory=list)


class WeeklyAdherence(CamelModel):
    date: str = Field(..., description="Day label, e.g. 'Mar 1'")
    adherence_rate: int
    total: int
    taken: int


class UpcomingDose(CamelModel):
    medication: MedicationOut
    due_time: datetime


class Dashboard(CamelModel):
    stats: AdherenceStat
    band: Literal["good", "fair", "poor"]
    upcoming: List[UpcomingDose]


class Analytics(CamelModel):
    overall_adherence: int
    week_start: str
    week_end: str
    weekly: List[WeeklyAdherence]
    most_missed: List[MissedMedication]
    can_advance: bool


class ScheduledMedication(CamelModel):
    medication: MedicationOut
    taken: bool


class CalendarDay(CamelModel):
    date: str
    scheduled: List[ScheduledMedication]
    logs: List[RecentDoseLog]
    days_with_logs: List[str]
