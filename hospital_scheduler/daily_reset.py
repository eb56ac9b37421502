"""Daily appointment counter reset.

Counts must not carry over across days. Two modes share one predicate
("was the counter last zeroed on the current UTC calendar day?"):

- Lazy: checked per doctor before every read that feeds allocation or
  listing. A stale doctor is zeroed in the store and the refreshed state
  is used for the current decision.
- Sweep: the 00:00 UTC job and the admin endpoint zero every active
  doctor unconditionally.

Both are idempotent within a UTC day.
"""
from datetime import datetime, time, UTC
from typing import Callable, List, Optional

from hospital_scheduler.domain import Doctor, as_utc
from hospital_scheduler.logging_config import get_logger
from hospital_scheduler.store import SchedulerStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(UTC)


def start_of_utc_day(now: datetime) -> datetime:
    """UTC midnight of the day containing `now`."""
    return datetime.combine(as_utc(now).date(), time.min, tzinfo=UTC)


def is_same_utc_day(last_reset: Optional[datetime], now: datetime) -> bool:
    """Whether `last_reset` falls on the same UTC calendar day as `now`."""
    if last_reset is None:
        return False
    return as_utc(last_reset).date() == as_utc(now).date()


def effective_count(doctor: Doctor, now: datetime) -> int:
    """Appointments that count against today's capacity."""
    if is_same_utc_day(doctor.last_reset_date, now):
        return doctor.current_appointments
    return 0


class DailyResetService:
    """Applies lazy per-doctor resets and the bulk sweep."""

    def __init__(self, store: SchedulerStore, clock: Clock = utc_clock):
        self.store = store
        self.clock = clock

    def refresh(self, doctor: Doctor, now: Optional[datetime] = None) -> Doctor:
        """
        Apply the lazy reset to one doctor.

        Args:
            doctor: Snapshot read from the store
            now: Decision time (defaults to the service clock)

        Returns:
            The doctor as it stands after any reset
        """
        now = now or self.clock()
        if is_same_utc_day(doctor.last_reset_date, now):
            return doctor

        reset = self.store.reset_doctor_if_stale(doctor.doctor_id, start_of_utc_day(now), now)
        if reset:
            logger.info(
                "doctor_counter_reset",
                mode="lazy",
                doctor_id=doctor.doctor_id,
                previous_count=doctor.current_appointments,
            )
            return doctor.model_copy(update={"current_appointments": 0, "last_reset_date": now})

        # Another request reset this doctor first; use its state
        current = self.store.get_doctor(doctor.doctor_id)
        if current is None:
            return doctor.model_copy(update={"current_appointments": effective_count(doctor, now)})
        return current

    def refresh_all(self, doctors: List[Doctor], now: Optional[datetime] = None) -> List[Doctor]:
        """Apply the lazy reset to every doctor, preserving order."""
        now = now or self.clock()
        return [self.refresh(doctor, now) for doctor in doctors]

    def sweep(self) -> int:
        """
        Zero every active doctor's counter unconditionally.

        Returns:
            Number of doctors reset
        """
        now = self.clock()
        count = self.store.reset_all_active_doctors(now)
        logger.info("daily_reset_sweep", doctors_reset=count, reset_at=now.isoformat())
        return count
