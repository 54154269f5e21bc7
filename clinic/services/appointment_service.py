from datetime import date, datetime
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.exceptions import (
    ConflictError, InvalidError, NotFoundError, UnauthorizedError
)
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..repositories import AppointmentRepository
from .availability import BookingValidation
from .base import storage_boundary, storage_errors
from .token_service import TokenService
from .validation_service import ValidationService

logger = logging.getLogger(__name__)

SLOT_TAKEN = "Appointment slot unavailable"

def to_local_naive(moment: datetime) -> datetime:
    """Appointment times are stored as naive clinic-local datetimes."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment

class AppointmentService:
    """Appointment lifecycle: Scheduled -> Completed or Scheduled -> Cancelled.

    Completed and Cancelled are terminal. Availability is checked before
    every write; the partial unique index on (doctor, time) catches the
    bookings that race past that check.
    """

    def __init__(self, db: Session, token_service: TokenService):
        self.db = db
        self.token_service = token_service
        self.appointments = AppointmentRepository(db)
        self.validation = ValidationService(db, token_service)

    @storage_boundary
    def book(self, patient: Patient, doctor_id: int, appointment_time: datetime) -> Appointment:
        """Book a slot for a patient."""
        appointment_time = to_local_naive(appointment_time)
        if appointment_time <= datetime.now():
            raise InvalidError("Appointment time must be in the future")

        self._check_slot(doctor_id, appointment_time)

        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient.id,
            appointment_time=appointment_time,
            status=AppointmentStatus.SCHEDULED.value,
        )
        with storage_errors(SLOT_TAKEN, "Error booking appointment"):
            appointment = self.appointments.save(appointment)

        logger.info(
            f"Booked appointment {appointment.id} for patient {patient.id} "
            f"with doctor {doctor_id} at {appointment_time}"
        )
        return appointment

    @storage_boundary
    def update(
        self,
        appointment_id: int,
        patient: Patient,
        appointment_time: datetime,
        doctor_id: Optional[int] = None
    ) -> Appointment:
        """Move a scheduled appointment to a new time and optionally a new doctor."""
        appointment = self._get(appointment_id)
        if appointment.patient_id != patient.id:
            raise UnauthorizedError("Appointment belongs to another patient")
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise ConflictError("Only scheduled appointments can be changed")

        appointment_time = to_local_naive(appointment_time)
        if appointment_time <= datetime.now():
            raise InvalidError("Appointment time must be in the future")

        target_doctor_id = doctor_id if doctor_id is not None else appointment.doctor_id
        self._check_slot(target_doctor_id, appointment_time, exclude_appointment_id=appointment.id)

        appointment.doctor_id = target_doctor_id
        appointment.appointment_time = appointment_time
        with storage_errors(SLOT_TAKEN, "Failed to update appointment"):
            appointment = self.appointments.save(appointment)

        logger.info(f"Rescheduled appointment {appointment.id} to {appointment_time}")
        return appointment

    @storage_boundary
    def cancel(self, appointment_id: int, requester_token: str) -> Appointment:
        """Cancel an appointment on behalf of the patient who owns it."""
        appointment = self.appointments.find_by_id(appointment_id)
        if appointment is None or appointment.status == AppointmentStatus.CANCELLED:
            raise NotFoundError("Appointment not found")

        requester = self.token_service.extract_identifier(requester_token)
        if appointment.patient is None or appointment.patient.email != requester:
            raise UnauthorizedError("Only the patient who booked it can cancel this appointment")

        if appointment.status == AppointmentStatus.COMPLETED:
            raise ConflictError("Completed appointments cannot be cancelled")

        appointment.status = AppointmentStatus.CANCELLED.value
        with storage_errors("Appointment changed concurrently", "Failed to cancel appointment"):
            appointment = self.appointments.save(appointment)

        logger.info(f"Cancelled appointment {appointment.id}")
        return appointment

    @storage_boundary
    def complete(self, appointment_id: int, doctor: Doctor) -> Appointment:
        appointment = self._get(appointment_id)
        if appointment.doctor_id != doctor.id:
            raise UnauthorizedError("Appointment belongs to another doctor")
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise ConflictError("Only scheduled appointments can be completed")

        appointment.status = AppointmentStatus.COMPLETED.value
        with storage_errors("Appointment changed concurrently", "Failed to complete appointment"):
            return self.appointments.save(appointment)

    @storage_boundary
    def query_for_doctor(
        self,
        doctor_id: int,
        day: date,
        patient_name: Optional[str] = None
    ) -> List[Appointment]:
        """A doctor's appointments on a date, optionally for one patient name (case-insensitive)."""
        appointments = self.appointments.find_by_doctor_on_day(doctor_id, day)
        if patient_name:
            wanted = patient_name.strip().lower()
            appointments = [
                appointment for appointment in appointments
                if appointment.patient and appointment.patient.name.lower() == wanted
            ]
        return appointments

    @storage_boundary
    def query_for_patient(
        self,
        patient_id: int,
        status: Optional[AppointmentStatus] = None,
        doctor_name: Optional[str] = None
    ) -> List[Appointment]:
        return self.appointments.find_by_patient(patient_id, status=status, doctor_name=doctor_name)

    def _get(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    def _check_slot(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_appointment_id: Optional[int] = None
    ) -> None:
        result = self.validation.validate_appointment(
            doctor_id, appointment_time, exclude_appointment_id=exclude_appointment_id
        )
        if result is BookingValidation.INVALID:
            raise InvalidError("Invalid doctor ID")
        if result is BookingValidation.UNAVAILABLE:
            raise ConflictError(SLOT_TAKEN)
