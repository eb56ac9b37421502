"""FastAPI dependency injection functions."""
from functools import lru_cache
from fastapi import Depends

from hospital_scheduler import config
from hospital_scheduler.allocator import Allocator
from hospital_scheduler.appointment_history import AppointmentHistory
from hospital_scheduler.daily_reset import DailyResetService
from hospital_scheduler.doctor_registry import DoctorRegistry
from hospital_scheduler.store import SchedulerStore


@lru_cache(maxsize=1)
def get_store() -> SchedulerStore:
    """
    Get the data store (cached singleton).

    Pattern: Create the engine once, reuse its connection pool across requests.
    Tests replace this via app.dependency_overrides.
    """
    return SchedulerStore(database_url=config.DATABASE_URL)


def get_reset_service(store: SchedulerStore = Depends(get_store)) -> DailyResetService:
    return DailyResetService(store)


def get_allocator(
    store: SchedulerStore = Depends(get_store),
    reset_service: DailyResetService = Depends(get_reset_service),
) -> Allocator:
    return Allocator(store, reset_service=reset_service, clock=reset_service.clock)


def get_doctor_registry(
    store: SchedulerStore = Depends(get_store),
    reset_service: DailyResetService = Depends(get_reset_service),
) -> DoctorRegistry:
    return DoctorRegistry(store, reset_service=reset_service)


def get_appointment_history(
    store: SchedulerStore = Depends(get_store),
    reset_service: DailyResetService = Depends(get_reset_service),
) -> AppointmentHistory:
    return AppointmentHistory(store, clock=reset_service.clock)
