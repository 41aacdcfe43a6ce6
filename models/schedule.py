"""
Schedule data models for the Intake Matcher.

This module defines the bookable supply (AvailabilitySlot) and the
booking records created when a patient commits to a slot.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from datetime import datetime

from .clinician import Clinician


def _require_aware(v: datetime) -> datetime:
    # Wall-clock timestamps are ambiguous across timezones
    if v.tzinfo is None or v.utcoffset() is None:
        raise ValueError("Timestamp must carry a timezone offset")
    return v


class AvailabilitySlot(BaseModel):
    """A bookable clinician time interval, consumed (booked) at most once."""

    id: str = Field(min_length=1, description="Slot identifier")
    clinician_id: str = Field(description="Owning clinician")
    start_time: datetime = Field(description="Absolute start instant")
    end_time: datetime = Field(description="Absolute end instant")
    is_booked: bool = Field(default=False, description="True once an appointment consumes the slot")

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": "slot_0001",
            "clinician_id": "clin_001",
            "start_time": "2025-01-15T15:00:00Z",
            "end_time": "2025-01-15T16:00:00Z",
            "is_booked": False
        }
    })

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_timezone(cls, v):
        return _require_aware(v)

    @field_validator('is_booked', mode='before')
    @classmethod
    def default_not_booked(cls, v):
        return False if v is None else v

    @model_validator(mode='after')
    def validate_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("End time must be strictly after start time")
        return self

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)


class AppointmentStatus(str, Enum):
    """Lifecycle of a booked appointment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingRequest(BaseModel):
    """Structured request handed to the appointment booking sink."""
    clinician_id: str = Field(min_length=1)
    slot_id: str = Field(min_length=1)
    patient_id: str = Field(min_length=1)
    start_time: datetime

    model_config = ConfigDict(frozen=True)

    @field_validator('start_time')
    @classmethod
    def validate_timezone(cls, v):
        return _require_aware(v)


class Appointment(BaseModel):
    """A committed booking."""
    id: str
    clinician_id: str
    slot_id: str
    patient_id: str
    start_time: datetime
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING)
    created_at: datetime
    updated_at: datetime


class BookingResult(BaseModel):
    """Outcome of a booking or cancellation attempt."""
    success: bool
    appointment_id: Optional[str] = None
    error: Optional[str] = None


class ClinicianMatch(BaseModel):
    """One ranked entry of a match response."""
    clinician: Clinician
    fit_score: int = Field(ge=0, le=100)
    available_slots: List[AvailabilitySlot] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def available_slot_count(self) -> int:
        return len(self.available_slots)


class MatchResponse(BaseModel):
    """
    Result of a matching request.
    An empty successful response means no clinician met the score floor.
    """
    success: bool
    matches: List[ClinicianMatch] = Field(default_factory=list)
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list, description="Non-fatal upstream problems")
