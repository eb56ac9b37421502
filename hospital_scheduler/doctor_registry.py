"""Doctor registry: listing, lookup, registration and soft deletion."""
from typing import List, Optional

from hospital_scheduler.daily_reset import Clock, DailyResetService, utc_clock
from hospital_scheduler.domain import Doctor
from hospital_scheduler.errors import NotFoundError
from hospital_scheduler.logging_config import get_logger
from hospital_scheduler.store import SchedulerStore

logger = get_logger(__name__)


class DoctorRegistry:
    """High-level service for doctor-related operations"""

    def __init__(
        self,
        store: SchedulerStore,
        reset_service: Optional[DailyResetService] = None,
        clock: Clock = utc_clock,
    ):
        self.store = store
        self.reset_service = reset_service or DailyResetService(store, clock=clock)

    def list_doctors(
        self,
        specialization: Optional[str] = None,
        available_only: bool = False,
    ) -> List[Doctor]:
        """
        List active doctors with today's counters.

        Args:
            specialization: Case-insensitive substring filter
            available_only: Only doctors with free capacity

        Returns:
            Doctors ordered by specialization, then name
        """
        doctors = self.store.find_doctors(specialization_contains=specialization, is_active=True)
        doctors = self.reset_service.refresh_all(doctors)
        if available_only:
            doctors = [d for d in doctors if d.is_available]
        return doctors

    def get_doctor(self, doctor_id: str) -> Doctor:
        """
        Get one active doctor.

        Raises:
            NotFoundError: If the doctor is unknown or soft-deleted
        """
        doctor = self.store.get_doctor(doctor_id)
        if doctor is None or not doctor.is_active:
            raise NotFoundError("Doctor not found")
        return self.reset_service.refresh(doctor)

    def register_doctor(
        self,
        name: str,
        specialization: str,
        max_daily_patients: int,
        doctor_id: Optional[str] = None,
    ) -> Doctor:
        """
        Register a doctor.

        Raises:
            ConflictError: If an externally supplied doctor_id is taken
        """
        doctor = self.store.add_doctor(
            name=name,
            specialization=specialization,
            max_daily_patients=max_daily_patients,
            doctor_id=doctor_id,
        )
        logger.info(
            "doctor_registered",
            doctor_id=doctor.doctor_id,
            specialization=doctor.specialization,
            capacity=doctor.max_daily_patients,
        )
        return doctor

    def remove_doctor(self, doctor_id: str) -> Doctor:
        """
        Soft delete a doctor (is_active -> False).

        Raises:
            NotFoundError: If the doctor is unknown or already removed
        """
        doctor = self.store.deactivate_doctor(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        logger.info("doctor_deactivated", doctor_id=doctor_id)
        return doctor

    def list_specializations(self) -> List[str]:
        return self.store.distinct_specializations()
