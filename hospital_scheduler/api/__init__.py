"""API package initialization."""
from hospital_scheduler.api.models import BookingRequest, BookingResponse, DoctorCreate, ErrorResponse

__all__ = ["BookingRequest", "BookingResponse", "DoctorCreate", "ErrorResponse"]
