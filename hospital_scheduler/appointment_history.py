"""Read-only queries over persisted appointments."""
from typing import Dict, List, Optional

from hospital_scheduler import config
from hospital_scheduler.daily_reset import Clock, start_of_utc_day, utc_clock
from hospital_scheduler.domain import Appointment, AppointmentStatus
from hospital_scheduler.store import SchedulerStore


class AppointmentHistory:
    """Appointment listing and booking statistics."""

    def __init__(self, store: SchedulerStore, clock: Clock = utc_clock):
        self.store = store
        self.clock = clock

    def list_appointments(
        self,
        status: Optional[AppointmentStatus] = None,
        specialization: Optional[str] = None,
        limit: int = config.DEFAULT_APPOINTMENT_LIMIT,
    ) -> List[Appointment]:
        """Newest appointments first, optionally filtered."""
        limit = max(1, min(limit, config.MAX_APPOINTMENT_LIMIT))
        return self.store.find_appointments(
            status=status,
            specialization_contains=specialization,
            limit=limit,
        )

    def stats(self) -> Dict[str, Dict[str, int]]:
        """
        Booked/rejected counts overall and for the current UTC day.

        Returns:
            {"total": {"booked": n, "rejected": n}, "today": {...}}
        """
        today = start_of_utc_day(self.clock())
        booked, rejected = AppointmentStatus.BOOKED, AppointmentStatus.REJECTED
        return {
            "total": {
                "booked": self.store.count_appointments(status=booked),
                "rejected": self.store.count_appointments(status=rejected),
            },
            "today": {
                "booked": self.store.count_appointments(status=booked, created_since=today),
                "rejected": self.store.count_appointments(status=rejected, created_since=today),
            },
        }
