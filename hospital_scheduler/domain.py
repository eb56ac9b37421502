"""Domain models for doctors, appointments and allocation outcomes.

Pattern: Separate database persistence from domain models.
Doctor (domain) vs api.database_models.Doctor (database). Store methods
convert rows into these models so nothing outside the store holds a live
SQLAlchemy session.
"""
import re
from datetime import datetime, UTC
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on the way back)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


_TITLE = re.compile(r"dr[.\s]", re.IGNORECASE)


def doctor_title(name: str) -> str:
    """Prefix "Dr. " unless the name already starts with a Dr title."""
    return name if _TITLE.match(name) else f"Dr. {name}"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the JSON API."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AppointmentStatus(str, Enum):
    """Appointment status enum"""
    BOOKED = "booked"
    REJECTED = "rejected"


class Doctor(CamelModel):
    """Doctor with daily capacity accounting."""
    doctor_id: str
    name: str
    specialization: str
    max_daily_patients: int = Field(..., ge=1)
    current_appointments: int = Field(default=0, ge=0)
    is_active: bool = True
    last_reset_date: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("last_reset_date", "created_at", "updated_at")
    @classmethod
    def _normalize_timestamps(cls, v):
        return as_utc(v)

    @computed_field(alias="slotsRemaining")
    @property
    def slots_remaining(self) -> int:
        return max(0, self.max_daily_patients - self.current_appointments)

    @computed_field(alias="isAvailable")
    @property
    def is_available(self) -> bool:
        return self.is_active and self.current_appointments < self.max_daily_patients


class DoctorSummary(CamelModel):
    """Doctor fields embedded in appointment listings."""
    doctor_id: str
    name: str
    specialization: str


class Appointment(CamelModel):
    """Immutable booking attempt record (booked or rejected)."""
    id: int
    patient_name: str
    specialization: str
    status: AppointmentStatus
    doctor_id: Optional[str] = None
    doctor_name: Optional[str] = None
    rejection_reason: Optional[str] = None
    appointment_date: datetime
    created_at: datetime
    doctor: Optional[DoctorSummary] = None

    @field_validator("appointment_date", "created_at")
    @classmethod
    def _normalize_timestamps(cls, v):
        return as_utc(v)


class AllocationOutcome(str, Enum):
    """Terminal outcomes of a single allocate() call."""
    BOOKED = "booked"
    NO_DOCTORS = "no_doctors"
    ALL_FULL = "all_full"
    SLOT_TAKEN = "slot_taken"


class AllocationResult(BaseModel):
    """Result of an allocation decision.

    `appointment` is None only for SLOT_TAKEN, the lost-race path that
    persists nothing.
    """
    outcome: AllocationOutcome
    message: str
    appointment: Optional[Appointment] = None
    doctor: Optional[Doctor] = None
    total_doctors: Optional[int] = None

    @property
    def booked(self) -> bool:
        return self.outcome == AllocationOutcome.BOOKED

    @property
    def status(self) -> AppointmentStatus:
        return AppointmentStatus.BOOKED if self.booked else AppointmentStatus.REJECTED
