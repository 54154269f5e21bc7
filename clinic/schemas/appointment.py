from pydantic import BaseModel
from datetime import date, datetime, time
from typing import Optional

from ..models.appointment import Appointment, AppointmentStatus

class AppointmentCreate(BaseModel):
    doctor_id: int
    appointment_time: datetime

class AppointmentUpdate(BaseModel):
    appointment_time: datetime
    doctor_id: Optional[int] = None

class AppointmentResponse(BaseModel):
    """Appointment with the doctor and patient details a dashboard needs."""
    id: int
    doctor_id: int
    doctor_name: Optional[str] = None
    patient_id: int
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_address: Optional[str] = None
    appointment_time: datetime
    status: AppointmentStatus

    # Derived, never stored
    appointment_date: date
    appointment_time_only: time
    end_time: datetime

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentResponse":
        doctor = appointment.doctor
        patient = appointment.patient
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            doctor_name=doctor.name if doctor else None,
            patient_id=appointment.patient_id,
            patient_name=patient.name if patient else None,
            patient_email=patient.email if patient else None,
            patient_phone=patient.phone if patient else None,
            patient_address=patient.address if patient else None,
            appointment_time=appointment.appointment_time,
            status=AppointmentStatus(appointment.status),
            appointment_date=appointment.appointment_date,
            appointment_time_only=appointment.appointment_time_only,
            end_time=appointment.end_time,
        )
