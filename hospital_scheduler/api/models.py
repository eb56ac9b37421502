"""Pydantic models for API request/response validation."""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hospital_scheduler import config
from hospital_scheduler.domain import Appointment, CamelModel, Doctor


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class BookingRequest(CamelModel):
    """Request schema for POST /api/appointments/book."""
    patient_name: str = Field(
        ...,
        min_length=config.NAME_MIN_LENGTH,
        max_length=config.NAME_MAX_LENGTH,
        description="Patient name (2-100 characters)",
    )
    specialization: str = Field(
        ...,
        min_length=config.NAME_MIN_LENGTH,
        max_length=config.NAME_MAX_LENGTH,
        description="Requested specialization (matched ignoring case)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"patientName": "Alice Smith", "specialization": "Cardiology"}
        }
    )

    @field_validator("patient_name", "specialization", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)


class DoctorCreate(CamelModel):
    """Request schema for POST /api/doctors."""
    name: str = Field(..., min_length=config.NAME_MIN_LENGTH, max_length=config.NAME_MAX_LENGTH)
    specialization: str = Field(
        ..., min_length=config.NAME_MIN_LENGTH, max_length=config.NAME_MAX_LENGTH
    )
    max_daily_patients: int = Field(
        ..., ge=config.MIN_DAILY_PATIENTS, le=config.MAX_DAILY_PATIENTS
    )
    doctor_id: Optional[str] = Field(
        None, min_length=1, max_length=config.DOCTOR_ID_MAX_LENGTH,
        description="Optional external id; generated when omitted",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Gregory House",
                "specialization": "Diagnostics",
                "maxDailyPatients": 8,
                "doctorId": "DOC-HOUSE",
            }
        }
    )

    @field_validator("name", "specialization", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)

    @field_validator("doctor_id", mode="before")
    @classmethod
    def blank_doctor_id_is_none(cls, v):
        v = _strip(v)
        return v or None


class BookingData(CamelModel):
    appointment: Appointment
    doctor: Doctor


class BookingResponse(CamelModel):
    """Response after a booking attempt (booked or rejected)."""
    success: bool
    status: str
    message: str
    total_doctors: Optional[int] = None
    data: Optional[Union[BookingData, Appointment]] = None


class DoctorResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: Optional[Doctor] = None


class DoctorListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[Doctor]


class SpecializationsResponse(CamelModel):
    success: bool = True
    data: List[str]


class AppointmentListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[Appointment]


class StatsResponse(CamelModel):
    success: bool = True
    data: Dict[str, Dict[str, int]]


class MessageResponse(CamelModel):
    success: bool = True
    message: str
    count: Optional[int] = None


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""
    success: bool = False
    message: str = Field(..., description="Error message")
    code: Optional[str] = Field(None, description="Error code")
    errors: Optional[List[FieldError]] = Field(None, description="Per-field validation errors")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "Validation failed",
                "code": "VALIDATION_ERROR",
                "errors": [{"field": "patientName", "message": "Patient name is required"}],
            }
        }
    )
