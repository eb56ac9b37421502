"""Test API request/response models."""
import pytest
from datetime import datetime, UTC
from pydantic import ValidationError
from hospital_scheduler.api.models import BookingRequest, DoctorCreate
from hospital_scheduler.domain import Doctor, doctor_title


def test_booking_request_valid():
    """camelCase payload should pass validation."""
    req = BookingRequest.model_validate({"patientName": "Alice", "specialization": "Cardiology"})
    assert req.patient_name == "Alice"
    assert req.specialization == "Cardiology"


def test_booking_request_strips_whitespace():
    req = BookingRequest(patient_name="  Alice  ", specialization=" cardiology ")
    assert req.patient_name == "Alice"
    assert req.specialization == "cardiology"


def test_booking_request_short_name_fails():
    """Names must be at least 2 characters after trimming."""
    with pytest.raises(ValidationError) as exc_info:
        BookingRequest.model_validate({"patientName": " A ", "specialization": "Cardiology"})
    assert "patientName" in str(exc_info.value)


def test_booking_request_missing_specialization_fails():
    with pytest.raises(ValidationError):
        BookingRequest.model_validate({"patientName": "Alice"})


@pytest.mark.parametrize("capacity", [0, 101])
def test_doctor_create_capacity_bounds(capacity):
    with pytest.raises(ValidationError):
        DoctorCreate(name="Dr. A", specialization="Cardiology", max_daily_patients=capacity)


def test_doctor_create_blank_doctor_id_is_none():
    payload = DoctorCreate.model_validate(
        {"name": "Dr. A", "specialization": "Cardiology", "maxDailyPatients": 3, "doctorId": "  "}
    )
    assert payload.doctor_id is None


def test_doctor_create_doctor_id_too_long_fails():
    with pytest.raises(ValidationError):
        DoctorCreate(
            name="Dr. A", specialization="Cardiology", max_daily_patients=3, doctor_id="X" * 51
        )


def test_doctor_serializes_computed_fields_in_camel_case():
    doctor = Doctor(
        doctor_id="DOC-1",
        name="Dr. A",
        specialization="Cardiology",
        max_daily_patients=5,
        current_appointments=3,
        last_reset_date=datetime(2026, 3, 10, tzinfo=UTC),
    )

    data = doctor.model_dump(by_alias=True)

    assert data["doctorId"] == "DOC-1"
    assert data["maxDailyPatients"] == 5
    assert data["currentAppointments"] == 3
    assert data["slotsRemaining"] == 2
    assert data["isAvailable"] is True


def test_inactive_doctor_is_not_available():
    doctor = Doctor(
        doctor_id="DOC-1",
        name="Dr. A",
        specialization="Cardiology",
        max_daily_patients=5,
        current_appointments=0,
        is_active=False,
        last_reset_date=datetime(2026, 3, 10, tzinfo=UTC),
    )
    assert doctor.is_available is False
    assert doctor.slots_remaining == 5


def test_overshoot_counter_reports_zero_slots():
    doctor = Doctor(
        doctor_id="DOC-1",
        name="Dr. A",
        specialization="Cardiology",
        max_daily_patients=1,
        current_appointments=2,
        last_reset_date=datetime(2026, 3, 10, tzinfo=UTC),
    )
    assert doctor.slots_remaining == 0
    assert doctor.is_available is False


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Gregory House", "Dr. Gregory House"),
        ("Drake Ramoray", "Dr. Drake Ramoray"),
        ("Dr. B", "Dr. B"),
        ("dr Quinn", "dr Quinn"),
    ],
)
def test_doctor_title_is_not_doubled(name, expected):
    assert doctor_title(name) == expected
