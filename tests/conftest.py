"""Shared test fixtures."""
import os

os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from datetime import datetime, timedelta, UTC
from typing import Optional

from hospital_scheduler.api.database_models import Doctor as DoctorRow
from hospital_scheduler.domain import Doctor
from hospital_scheduler.store import SchedulerStore

FIXED_NOW = datetime(2026, 3, 10, 14, 30, tzinfo=UTC)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def store():
    """Create SchedulerStore with in-memory database."""
    store = SchedulerStore(database_url="sqlite:///:memory:")
    yield store
    store.close()


def seed_doctor(
    store: SchedulerStore,
    name: str,
    specialization: str,
    max_daily_patients: int,
    current: int = 0,
    last_reset: Optional[datetime] = None,
    doctor_id: Optional[str] = None,
    is_active: bool = True,
) -> Doctor:
    """Register a doctor, then force its counter/reset date/active flag."""
    doctor = store.add_doctor(name, specialization, max_daily_patients, doctor_id=doctor_id)
    with store.SessionLocal() as db:
        row = db.get(DoctorRow, doctor.doctor_id)
        row.current_appointments = current
        row.last_reset_date = last_reset or datetime.now(UTC)
        row.is_active = is_active
        db.commit()
    return store.get_doctor(doctor.doctor_id)


@pytest.fixture
def add_doctor(store, clock):
    """Doctor factory whose counters were last reset 'today' per the fake clock."""
    def _add(name, specialization, max_daily_patients, current=0, last_reset=None, **kwargs):
        return seed_doctor(
            store,
            name,
            specialization,
            max_daily_patients,
            current=current,
            last_reset=last_reset or clock(),
            **kwargs,
        )
    return _add
