"""SQLAlchemy-backed data store for doctors and appointments.

Pattern: Thin wrapper around SQLAlchemy, one short-lived session per call.
Every mutation of a doctor's appointment counter goes through a single
UPDATE ... SET current_appointments = current_appointments + :delta,
re-read inside the same transaction, so concurrent writers (threads or
processes sharing the database) always observe each other's increments.
"""
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import create_engine, distinct, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload, sessionmaker
from sqlalchemy.pool import StaticPool

from hospital_scheduler.api.database_models import (
    Appointment as AppointmentRow,
    Base,
    Doctor as DoctorRow,
    specialization_key,
    utc_now,
)
from hospital_scheduler.domain import Appointment, AppointmentStatus, Doctor
from hospital_scheduler.errors import ConflictError


def _engine_options(database_url: str) -> dict:
    """Engine kwargs; SQLite needs cross-thread access for the ASGI threadpool."""
    options = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every thread sees an empty database
            options["poolclass"] = StaticPool
    return options


class SchedulerStore:
    """
    Persistence for doctors and appointments.

    Responsibilities:
    - Doctor lookup, registration and soft deletion
    - Atomic appointment counter increments
    - Lazy (conditional) and bulk daily counter resets
    - Appointment creation, listing and counting
    """

    def __init__(self, database_url: str):
        """
        Initialize store with database connection.

        Args:
            database_url: SQLAlchemy connection string
        """
        self.engine = create_engine(database_url, **_engine_options(database_url))
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def close(self):
        """Dispose of the engine's connection pool."""
        self.engine.dispose()

    # ------------------------------------------------------------------ doctors

    def find_doctors(
        self,
        specialization_equals_ci: Optional[str] = None,
        specialization_contains: Optional[str] = None,
        is_active: Optional[bool] = True,
    ) -> List[Doctor]:
        """
        Find doctors, ordered by specialization then name.

        Args:
            specialization_equals_ci: Exact specialization, ignoring case
            specialization_contains: Case-insensitive substring filter
            is_active: Active flag filter (None = any)

        Returns:
            Matching doctors
        """
        stmt = select(DoctorRow)
        if is_active is not None:
            stmt = stmt.where(DoctorRow.is_active == is_active)
        if specialization_equals_ci is not None:
            stmt = stmt.where(
                DoctorRow.specialization_key == specialization_key(specialization_equals_ci)
            )
        if specialization_contains:
            stmt = stmt.where(
                DoctorRow.specialization_key.contains(
                    specialization_key(specialization_contains), autoescape=True
                )
            )
        stmt = stmt.order_by(DoctorRow.specialization, DoctorRow.name)

        with self.SessionLocal() as db:
            return [Doctor.model_validate(row) for row in db.scalars(stmt)]

    def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        """Get a doctor by id (active or not)."""
        with self.SessionLocal() as db:
            row = db.get(DoctorRow, doctor_id)
            return Doctor.model_validate(row) if row else None

    def add_doctor(
        self,
        name: str,
        specialization: str,
        max_daily_patients: int,
        doctor_id: Optional[str] = None,
    ) -> Doctor:
        """
        Register a new doctor.

        Args:
            name: Display name
            specialization: Free-text specialization
            max_daily_patients: Daily capacity
            doctor_id: Externally supplied id (generated when omitted)

        Returns:
            Created doctor

        Raises:
            ConflictError: If doctor_id already exists
        """
        with self.SessionLocal() as db:
            if doctor_id and db.get(DoctorRow, doctor_id) is not None:
                raise ConflictError(f'Doctor ID "{doctor_id}" already exists')

            row = DoctorRow(
                name=name,
                specialization=specialization,
                specialization_key=specialization_key(specialization),
                max_daily_patients=max_daily_patients,
                current_appointments=0,
                is_active=True,
                last_reset_date=utc_now(),
            )
            if doctor_id:
                row.doctor_id = doctor_id
            db.add(row)
            try:
                db.flush()
            except IntegrityError:
                db.rollback()
                raise ConflictError(f'Doctor ID "{doctor_id or row.doctor_id}" already exists')

            doctor = Doctor.model_validate(row)
            db.commit()
            return doctor

    def deactivate_doctor(self, doctor_id: str) -> Optional[Doctor]:
        """
        Soft delete an active doctor.

        Returns:
            The deactivated doctor, or None if unknown or already inactive
        """
        with self.SessionLocal() as db:
            row = db.get(DoctorRow, doctor_id)
            if row is None or not row.is_active:
                return None

            row.is_active = False
            db.flush()
            doctor = Doctor.model_validate(row)
            db.commit()
            return doctor

    def distinct_specializations(self) -> List[str]:
        """Distinct specializations of active doctors, sorted."""
        stmt = (
            select(distinct(DoctorRow.specialization))
            .where(DoctorRow.is_active == True)
            .order_by(DoctorRow.specialization)
        )
        with self.SessionLocal() as db:
            return list(db.scalars(stmt))

    # ------------------------------------------------------------ counters

    def increment_appointment_counter(self, doctor_id: str, delta: int = 1) -> Optional[Doctor]:
        """
        Atomically add `delta` to an active doctor's counter.

        A negative delta never takes the counter below zero.

        Args:
            doctor_id: Doctor identifier
            delta: Amount to add (default +1)

        Returns:
            Post-increment doctor state, or None if the doctor is unknown,
            inactive, or (for negative deltas) the counter is too low
        """
        stmt = (
            update(DoctorRow)
            .where(DoctorRow.doctor_id == doctor_id, DoctorRow.is_active == True)
            .values(
                current_appointments=DoctorRow.current_appointments + delta,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            stmt = stmt.where(DoctorRow.current_appointments >= -delta)

        with self.SessionLocal() as db:
            result = db.execute(stmt)
            if result.rowcount == 0:
                db.rollback()
                return None

            # Same transaction: sees our own write, not a later one
            row = db.get(DoctorRow, doctor_id)
            doctor = Doctor.model_validate(row)
            db.commit()
            return doctor

    def reset_doctor_if_stale(self, doctor_id: str, day_start: datetime, now: datetime) -> bool:
        """
        Zero one doctor's counter unless it was last reset during the UTC day
        starting at `day_start`. A reset date after that day (clock skew between
        processes sharing the database) counts as stale too.

        The staleness condition is evaluated by the database, so a request
        that already reset and booked today is never overwritten.

        Returns:
            True if the row was reset
        """
        stmt = (
            update(DoctorRow)
            .where(
                DoctorRow.doctor_id == doctor_id,
                or_(
                    DoctorRow.last_reset_date < day_start,
                    DoctorRow.last_reset_date >= day_start + timedelta(days=1),
                ),
            )
            .values(current_appointments=0, last_reset_date=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        with self.SessionLocal() as db:
            result = db.execute(stmt)
            db.commit()
            return result.rowcount > 0

    def reset_all_active_doctors(self, now: Optional[datetime] = None) -> int:
        """
        Unconditionally zero every active doctor's counter.

        Returns:
            Number of doctors reset
        """
        now = now or utc_now()
        stmt = (
            update(DoctorRow)
            .where(DoctorRow.is_active == True)
            .values(current_appointments=0, last_reset_date=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        with self.SessionLocal() as db:
            result = db.execute(stmt)
            db.commit()
            return result.rowcount

    # --------------------------------------------------------- appointments

    def create_appointment(
        self,
        patient_name: str,
        specialization: str,
        status: AppointmentStatus,
        doctor_id: Optional[str] = None,
        doctor_name: Optional[str] = None,
        rejection_reason: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Appointment:
        """Persist one appointment record."""
        created_at = created_at or utc_now()
        with self.SessionLocal() as db:
            row = AppointmentRow(
                patient_name=patient_name,
                specialization=specialization,
                specialization_key=specialization_key(specialization),
                status=AppointmentStatus(status).value,
                doctor_id=doctor_id,
                doctor_name=doctor_name,
                rejection_reason=rejection_reason,
                appointment_date=created_at,
                created_at=created_at,
            )
            db.add(row)
            db.flush()
            appointment = Appointment.model_validate(row)
            db.commit()
            return appointment

    def _appointment_filters(
        self,
        status: Optional[AppointmentStatus] = None,
        specialization_contains: Optional[str] = None,
        created_since: Optional[datetime] = None,
    ) -> list:
        filters = []
        if status is not None:
            filters.append(AppointmentRow.status == AppointmentStatus(status).value)
        if specialization_contains:
            filters.append(
                AppointmentRow.specialization_key.contains(
                    specialization_key(specialization_contains), autoescape=True
                )
            )
        if created_since is not None:
            filters.append(AppointmentRow.created_at >= created_since)
        return filters

    def find_appointments(
        self,
        status: Optional[AppointmentStatus] = None,
        specialization_contains: Optional[str] = None,
        limit: int = 50,
    ) -> List[Appointment]:
        """
        List appointments, newest first, with the assigned doctor embedded.

        Args:
            status: Optional status filter
            specialization_contains: Case-insensitive substring filter
            limit: Maximum rows returned
        """
        stmt = (
            select(AppointmentRow)
            .options(selectinload(AppointmentRow.doctor))
            .where(*self._appointment_filters(status, specialization_contains))
            .order_by(AppointmentRow.created_at.desc(), AppointmentRow.id.desc())
            .limit(limit)
        )
        with self.SessionLocal() as db:
            return [Appointment.model_validate(row) for row in db.scalars(stmt)]

    def count_appointments(
        self,
        status: Optional[AppointmentStatus] = None,
        created_since: Optional[datetime] = None,
    ) -> int:
        """Count appointments matching the filters."""
        stmt = (
            select(func.count(AppointmentRow.id))
            .where(*self._appointment_filters(status, created_since=created_since))
        )
        with self.SessionLocal() as db:
            return db.scalar(stmt) or 0
