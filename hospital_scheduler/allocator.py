"""Doctor allocation for specialization-based booking.

Flow for allocate(specialization, patient_name):
1. Active doctors whose specialization equals the request (ignoring case)
2. Lazy daily reset on each candidate
3. Keep doctors under capacity
4. Pick the least-loaded one (fewest appointments, then most headroom)
5. Claim the slot with an atomic +1 and verify the post-increment count

Pattern: optimistic concurrency. The snapshot used for selection may be
stale by the time the increment lands; the increment itself is atomic in
the store and the overshoot check afterwards decides who won the slot.
No locks are held between requests and nothing is retried here.
"""
from typing import List, Optional

from hospital_scheduler import config
from hospital_scheduler.daily_reset import Clock, DailyResetService, utc_clock
from hospital_scheduler.domain import (
    AllocationOutcome,
    AllocationResult,
    AppointmentStatus,
    Doctor,
    doctor_title,
)
from hospital_scheduler.logging_config import get_logger
from hospital_scheduler.store import SchedulerStore

logger = get_logger(__name__)

SLOT_TAKEN_MESSAGE = "Appointment slot was just taken. Please try again."


def selection_key(doctor: Doctor):
    """Sort key: fewest appointments first, then most slots remaining."""
    return (doctor.current_appointments, -doctor.slots_remaining)


def select_doctor(eligible: List[Doctor]) -> Optional[Doctor]:
    """
    Pick the least-loaded doctor.

    sorted() is stable, so doctors tied on both keys keep their input order.

    Args:
        eligible: Doctors with free capacity

    Returns:
        Selected doctor, or None if `eligible` is empty
    """
    if not eligible:
        return None
    return sorted(eligible, key=selection_key)[0]


class Allocator:
    """Assigns booking requests to doctors under a daily capacity cap."""

    def __init__(
        self,
        store: SchedulerStore,
        reset_service: Optional[DailyResetService] = None,
        clock: Clock = utc_clock,
        release_slot_on_race: bool = config.RELEASE_SLOT_ON_RACE,
    ):
        """
        Initialize allocator.

        Args:
            store: Data store
            reset_service: Lazy reset helper (built from store/clock if omitted)
            clock: Returns the current UTC time
            release_slot_on_race: Undo the losing increment after an overshoot
        """
        self.store = store
        self.clock = clock
        self.reset_service = reset_service or DailyResetService(store, clock=clock)
        self.release_slot_on_race = release_slot_on_race

    def allocate(self, specialization: str, patient_name: str) -> AllocationResult:
        """
        Book the least-loaded available doctor in a specialization.

        Args:
            specialization: Requested specialization (exact, case-insensitive)
            patient_name: Patient display name

        Returns:
            AllocationResult; every outcome except SLOT_TAKEN has persisted
            exactly one appointment record
        """
        now = self.clock()
        candidates = self.store.find_doctors(specialization_equals_ci=specialization, is_active=True)

        if not candidates:
            reason = f"No doctors found with specialization: {specialization}"
            return self._reject(AllocationOutcome.NO_DOCTORS, specialization, patient_name, reason, 0)

        candidates = self.reset_service.refresh_all(candidates, now)
        eligible = [d for d in candidates if d.current_appointments < d.max_daily_patients]

        if not eligible:
            reason = (
                f'All {len(candidates)} doctor(s) in "{specialization}" '
                f"are fully booked for today"
            )
            return self._reject(
                AllocationOutcome.ALL_FULL, specialization, patient_name, reason, len(candidates)
            )

        selected = select_doctor(eligible)
        claimed = self.store.increment_appointment_counter(selected.doctor_id, delta=1)

        if claimed is None or claimed.current_appointments > claimed.max_daily_patients:
            return AllocationResult(
                outcome=AllocationOutcome.SLOT_TAKEN,
                message=SLOT_TAKEN_MESSAGE,
                doctor=self._handle_lost_race(selected, claimed),
                total_doctors=len(candidates),
            )

        appointment = self.store.create_appointment(
            patient_name=patient_name,
            specialization=specialization,
            status=AppointmentStatus.BOOKED,
            doctor_id=claimed.doctor_id,
            doctor_name=claimed.name,
            created_at=now,
        )
        logger.info(
            "appointment_booked",
            appointment_id=appointment.id,
            doctor_id=claimed.doctor_id,
            specialization=specialization,
            load=f"{claimed.current_appointments}/{claimed.max_daily_patients}",
        )
        return AllocationResult(
            outcome=AllocationOutcome.BOOKED,
            message=f"Appointment booked successfully with {doctor_title(claimed.name)}",
            appointment=appointment,
            doctor=claimed,
            total_doctors=len(candidates),
        )

    def _reject(
        self,
        outcome: AllocationOutcome,
        specialization: str,
        patient_name: str,
        reason: str,
        total_doctors: int,
    ) -> AllocationResult:
        appointment = self.store.create_appointment(
            patient_name=patient_name,
            specialization=specialization,
            status=AppointmentStatus.REJECTED,
            rejection_reason=reason,
            created_at=self.clock(),
        )
        logger.info(
            "appointment_rejected",
            appointment_id=appointment.id,
            outcome=outcome.value,
            specialization=specialization,
            total_doctors=total_doctors,
        )
        return AllocationResult(
            outcome=outcome,
            message=reason,
            appointment=appointment,
            total_doctors=total_doctors,
        )

    def _handle_lost_race(self, selected: Doctor, claimed: Optional[Doctor]) -> Optional[Doctor]:
        """
        Log the overshoot and, if configured, hand the slot back.

        Returns:
            The doctor as it stands afterwards, or None if it is gone
        """
        if claimed is None:
            logger.warning("allocation_target_vanished", doctor_id=selected.doctor_id)
            return None

        logger.warning(
            "allocation_lost_race",
            doctor_id=claimed.doctor_id,
            count=claimed.current_appointments,
            capacity=claimed.max_daily_patients,
        )
        if self.release_slot_on_race:
            return self.store.increment_appointment_counter(claimed.doctor_id, delta=-1)
        return claimed
