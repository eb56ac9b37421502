"""FastAPI server for the hospital appointment scheduler.

Features:
- Specialization-based booking with least-loaded doctor allocation
- Doctor registry endpoints (list, get, register, soft delete)
- Appointment history and stats
- Daily counter reset (00:00 UTC job + admin endpoint)
- Global exception handling, CORS, request ids, structured logging
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Optional
from fastapi import FastAPI, Request, status, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hospital_scheduler import config
from hospital_scheduler.allocator import Allocator
from hospital_scheduler.api.dependencies import (
    get_allocator,
    get_appointment_history,
    get_doctor_registry,
    get_reset_service,
    get_store,
)
from hospital_scheduler.api.models import (
    AppointmentListResponse,
    BookingData,
    BookingRequest,
    BookingResponse,
    DoctorCreate,
    DoctorListResponse,
    DoctorResponse,
    ErrorResponse,
    FieldError,
    MessageResponse,
    SpecializationsResponse,
    StatsResponse,
)
from hospital_scheduler.appointment_history import AppointmentHistory
from hospital_scheduler.daily_reset import DailyResetService
from hospital_scheduler.doctor_registry import DoctorRegistry
from hospital_scheduler.domain import AllocationOutcome, AppointmentStatus, doctor_title
from hospital_scheduler.errors import SchedulerError
from hospital_scheduler.logging_config import RequestIDMiddleware, setup_structured_logging
from hospital_scheduler.scheduler import DailyResetScheduler

logger = logging.getLogger(__name__)

BOOKING_STATUS_CODES = {
    AllocationOutcome.BOOKED: status.HTTP_201_CREATED,
    AllocationOutcome.NO_DOCTORS: status.HTTP_404_NOT_FOUND,
    AllocationOutcome.ALL_FULL: status.HTTP_409_CONFLICT,
    AllocationOutcome.SLOT_TAKEN: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    setup_structured_logging(config.LOG_LEVEL, json_logs=config.LOG_JSON)
    logger.info("FastAPI server starting up...")

    try:
        store = get_store()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    reset_scheduler = DailyResetScheduler(DailyResetService(store))
    reset_scheduler.start()

    yield

    reset_scheduler.shutdown()
    store.close()
    logger.info("FastAPI server shutting down...")


app = FastAPI(
    title="Hospital Appointment Scheduler API",
    description="Books patients with the least-loaded doctor of a specialization",
    version=config.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIDMiddleware)


def _error(status_code: int, message: str, code: str, errors=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code, errors=errors).model_dump(exclude_none=True),
    )


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with per-field messages."""
    errors = []
    for err in exc.errors():
        fields = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append(FieldError(field=".".join(fields) or "body", message=err.get("msg", "Invalid value")))
    return _error(status.HTTP_400_BAD_REQUEST, "Validation failed", "VALIDATION_ERROR", errors)


@app.exception_handler(SchedulerError)
async def scheduler_error_handler(request: Request, exc: SchedulerError):
    """Handle NotFoundError / ConflictError raised by the services."""
    return _error(exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(exc.detail)
    return _error(exc.status_code, message, "HTTP_ERROR")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions."""
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        "INTERNAL_ERROR",
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "ok",
        "message": "Hospital Appointment Scheduler API is running",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": config.ENVIRONMENT,
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API info."""
    return {
        "message": "Hospital Appointment Scheduler API",
        "version": config.API_VERSION,
        "endpoints": {
            "doctors": "/api/doctors",
            "appointments": "/api/appointments",
            "health": "/health",
        },
        "docs": "/docs",
    }


# --- Appointments ---

@app.post(
    "/api/appointments/book",
    tags=["Appointments"],
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": BookingResponse}, 409: {"model": BookingResponse}},
)
def book_appointment(request: BookingRequest, allocator: Allocator = Depends(get_allocator)):
    """
    Book an appointment by specialization.

    Returns:
        201 booked, 404 no doctor with that specialization,
        409 every doctor fully booked or the slot was just taken
    """
    result = allocator.allocate(request.specialization, request.patient_name)

    if result.outcome == AllocationOutcome.BOOKED:
        data = BookingData(appointment=result.appointment, doctor=result.doctor)
    else:
        data = result.appointment

    body = BookingResponse(
        success=result.booked,
        status=result.status.value,
        message=result.message,
        total_doctors=result.total_doctors if result.outcome == AllocationOutcome.ALL_FULL else None,
        data=data,
    )
    return JSONResponse(
        status_code=BOOKING_STATUS_CODES[result.outcome],
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@app.get("/api/appointments/stats", tags=["Appointments"], response_model=StatsResponse)
def appointment_stats(history: AppointmentHistory = Depends(get_appointment_history)):
    """Booked/rejected counts, overall and for today (UTC)."""
    return StatsResponse(data=history.stats())


@app.get("/api/appointments", tags=["Appointments"], response_model=AppointmentListResponse)
def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    specialization: Optional[str] = Query(None),
    limit: int = Query(config.DEFAULT_APPOINTMENT_LIMIT, ge=1, le=config.MAX_APPOINTMENT_LIMIT),
    history: AppointmentHistory = Depends(get_appointment_history),
):
    """Appointments, newest first."""
    appointments = history.list_appointments(
        status=status_filter, specialization=specialization, limit=limit
    )
    return AppointmentListResponse(count=len(appointments), data=appointments)


# --- Doctors ---

@app.get("/api/doctors/specializations", tags=["Doctors"], response_model=SpecializationsResponse)
def list_specializations(registry: DoctorRegistry = Depends(get_doctor_registry)):
    return SpecializationsResponse(data=registry.list_specializations())


@app.get("/api/doctors", tags=["Doctors"], response_model=DoctorListResponse)
def list_doctors(
    specialization: Optional[str] = Query(None),
    available: bool = Query(False),
    registry: DoctorRegistry = Depends(get_doctor_registry),
):
    """Active doctors with today's load, optionally only those with free slots."""
    doctors = registry.list_doctors(specialization=specialization, available_only=available)
    return DoctorListResponse(count=len(doctors), data=doctors)


@app.get("/api/doctors/{doctor_id}", tags=["Doctors"], response_model=DoctorResponse)
def get_doctor(doctor_id: str, registry: DoctorRegistry = Depends(get_doctor_registry)):
    return DoctorResponse(data=registry.get_doctor(doctor_id))


@app.post(
    "/api/doctors",
    tags=["Doctors"],
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_doctor(payload: DoctorCreate, registry: DoctorRegistry = Depends(get_doctor_registry)):
    """Register a doctor. 409 if the supplied doctorId already exists."""
    doctor = registry.register_doctor(
        name=payload.name,
        specialization=payload.specialization,
        max_daily_patients=payload.max_daily_patients,
        doctor_id=payload.doctor_id,
    )
    return DoctorResponse(message=f"{doctor_title(doctor.name)} added successfully", data=doctor)


@app.delete("/api/doctors/{doctor_id}", tags=["Doctors"], response_model=MessageResponse)
def delete_doctor(doctor_id: str, registry: DoctorRegistry = Depends(get_doctor_registry)):
    """Soft delete (the doctor row is kept, isActive becomes false)."""
    doctor = registry.remove_doctor(doctor_id)
    return MessageResponse(message=f"{doctor_title(doctor.name)} removed successfully")


@app.post("/api/doctors/reset/daily", tags=["Doctors"], response_model=MessageResponse)
def reset_daily_appointments(reset_service: DailyResetService = Depends(get_reset_service)):
    """Administrative sweep: zero every active doctor's counter now."""
    count = reset_service.sweep()
    return MessageResponse(message=f"Daily appointments reset for {count} doctor(s)", count=count)
