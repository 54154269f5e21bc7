from datetime import timedelta
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

APPOINTMENT_DURATION = timedelta(hours=1)

class AppointmentStatus(enum.IntEnum):
    SCHEDULED = 0
    COMPLETED = 1
    CANCELLED = 2

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)

    # Appointment details
    appointment_time = Column(DateTime, nullable=False, index=True)
    status = Column(Integer, nullable=False, default=AppointmentStatus.SCHEDULED.value)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")
    prescription = relationship("Prescription", back_populates="appointment", uselist=False)

    @property
    def appointment_date(self):
        return self.appointment_time.date()

    @property
    def appointment_time_only(self):
        return self.appointment_time.time()

    @property
    def end_time(self):
        return self.appointment_time + APPOINTMENT_DURATION

    @property
    def slot_label(self) -> str:
        """Start time as an "HH:MM" slot label."""
        return self.appointment_time.strftime("%H:%M")

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, time='{self.appointment_time}')>"

# No double booking: one live appointment per doctor per slot.
# Cancelled rows are kept for history and excluded from the constraint.
Index(
    "uq_appointments_doctor_slot_active",
    Appointment.doctor_id,
    Appointment.appointment_time,
    unique=True,
    postgresql_where=Appointment.status != int(AppointmentStatus.CANCELLED),
    sqlite_where=Appointment.status != int(AppointmentStatus.CANCELLED),
)
