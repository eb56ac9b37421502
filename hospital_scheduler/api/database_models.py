"""SQLAlchemy database models for the doctor/appointment store."""
import uuid
from datetime import datetime, UTC
from sqlalchemy import Column, String, DateTime, Boolean, Integer, Text, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utc_now():
    """Get current UTC timestamp."""
    return datetime.now(UTC)


def generate_doctor_id() -> str:
    """Generate a short human-friendly doctor id (DOC-1A2B3C4D)."""
    return f"DOC-{uuid.uuid4().hex[:8].upper()}"


def specialization_key(specialization: str) -> str:
    """Case-folded specialization used for matching (SQLite lower() is ASCII-only)."""
    return specialization.casefold()


class Doctor(Base):
    """Doctor table with the per-day appointment counter."""
    __tablename__ = "doctors"

    doctor_id = Column(String(50), primary_key=True, index=True, default=generate_doctor_id)
    name = Column(String(100), nullable=False)
    specialization = Column(String(100), nullable=False)
    specialization_key = Column(String(100), nullable=False, index=True)
    max_daily_patients = Column(Integer, nullable=False)
    current_appointments = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_reset_date = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    appointments = relationship("Appointment", back_populates="doctor")

    def __repr__(self):
        return (
            f"<Doctor(doctor_id={self.doctor_id}, specialization={self.specialization}, "
            f"load={self.current_appointments}/{self.max_daily_patients})>"
        )


class Appointment(Base):
    """Appointment table. Rows are written once and never updated."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_name = Column(String(100), nullable=False)
    specialization = Column(String(100), nullable=False)
    specialization_key = Column(String(100), nullable=False, index=True)
    doctor_id = Column(String(50), ForeignKey("doctors.doctor_id"), nullable=True, index=True)
    doctor_name = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, index=True)
    rejection_reason = Column(Text, nullable=True)
    appointment_date = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)

    doctor = relationship("Doctor", back_populates="appointments")

    def __repr__(self):
        return f"<Appointment(id={self.id}, status={self.status}, doctor_id={self.doctor_id})>"
