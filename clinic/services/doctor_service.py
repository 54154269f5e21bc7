from datetime import date
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.exceptions import ConflictError, NotFoundError
from ..core.security import get_password_hash
from ..models.doctor import Doctor
from ..repositories import AppointmentRepository, DoctorRepository
from ..schemas.doctor import DoctorCreate, DoctorUpdate
from .availability import (
    AvailabilityEngine, matches_time_of_day, normalize_slots, parse_time_of_day
)
from .base import storage_boundary, storage_errors

logger = logging.getLogger(__name__)

class DoctorService:
    def __init__(self, db: Session):
        self.db = db
        self.doctors = DoctorRepository(db)
        self.appointments = AppointmentRepository(db)
        self.availability = AvailabilityEngine(db)

    @storage_boundary
    def save_doctor(self, doctor_data: DoctorCreate) -> Doctor:
        """Register a new doctor."""
        if self.doctors.find_by_email(doctor_data.email):
            raise ConflictError("Doctor already exists")

        doctor = Doctor(
            name=doctor_data.name,
            specialty=doctor_data.specialty,
            email=doctor_data.email,
            phone=doctor_data.phone,
            password_hash=get_password_hash(doctor_data.password),
            available_times=normalize_slots(doctor_data.available_times),
        )
        with storage_errors("Doctor already exists"):
            doctor = self.doctors.save(doctor)

        logger.info(f"Registered doctor {doctor.id} ({doctor.email})")
        return doctor

    @storage_boundary
    def update_doctor(self, doctor_id: int, doctor_data: DoctorUpdate) -> Doctor:
        doctor = self.get_doctor(doctor_id)
        changes = doctor_data.model_dump(exclude_unset=True)

        new_email = changes.get("email")
        if new_email and new_email != doctor.email:
            other = self.doctors.find_by_email(new_email)
            if other is not None and other.id != doctor.id:
                raise ConflictError("Email already used by another doctor")

        if "password" in changes:
            password = changes.pop("password")
            if password:
                doctor.password_hash = get_password_hash(password)
        if "available_times" in changes:
            changes["available_times"] = normalize_slots(changes["available_times"] or [])

        for field, value in changes.items():
            if value is not None:
                setattr(doctor, field, value)

        with storage_errors("Email already used by another doctor"):
            return self.doctors.save(doctor)

    @storage_boundary
    def update_available_times(self, doctor: Doctor, times: List[str]) -> Doctor:
        """Replace the slots a doctor offers."""
        doctor.available_times = normalize_slots(times)
        with storage_errors("Doctor changed concurrently"):
            return self.doctors.save(doctor)

    @storage_boundary
    def get_doctors(self) -> List[Doctor]:
        return self.doctors.find_all()

    @storage_boundary
    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.doctors.find_by_id(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        return doctor

    @storage_boundary
    def delete_doctor(self, doctor_id: int) -> None:
        """Delete a doctor together with all of their appointments."""
        doctor = self.get_doctor(doctor_id)
        with storage_errors("Doctor is still referenced", "Failed to delete doctor"):
            # Committed together with the doctor delete below
            removed = self.appointments.delete_all_by_doctor_id(doctor.id)
            self.doctors.delete(doctor)
        logger.info(f"Deleted doctor {doctor_id} and {removed} appointment(s)")

    @storage_boundary
    def find_doctor_by_name(self, name: str) -> List[Doctor]:
        return self.doctors.find_by_name_and_specialty(name=name)

    @storage_boundary
    def filter_doctors(
        self,
        name: Optional[str] = None,
        specialty: Optional[str] = None,
        time_of_day: Optional[str] = None
    ) -> List[Doctor]:
        """Search doctors by name substring, specialty and AM/PM availability.

        Every filter is optional; omitted filters match all doctors.
        """
        period = parse_time_of_day(time_of_day) if time_of_day else None
        doctors = self.doctors.find_by_name_and_specialty(name=name, specialty=specialty)
        if period:
            doctors = [doctor for doctor in doctors if matches_time_of_day(doctor, period)]
        return doctors

    def get_doctor_availability(self, doctor_id: int, day: date) -> List[str]:
        return self.availability.get_availability(doctor_id, day)
