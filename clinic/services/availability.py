"""
Doctor availability.

A day is split into a fixed catalog of eight hourly slots, 09:00 through
16:00. Each doctor offers a subset of that catalog; a slot is available on
a given date when the doctor offers it and no live (non-cancelled)
appointment occupies it.
"""
from datetime import date, datetime
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
import enum

from ..core.exceptions import InvalidError, NotFoundError
from ..models.appointment import AppointmentStatus
from ..models.doctor import Doctor
from ..repositories import AppointmentRepository, DoctorRepository
from .base import storage_boundary

SLOT_CATALOG = (
    "09:00", "10:00", "11:00", "12:00",
    "13:00", "14:00", "15:00", "16:00",
)

class BookingValidation(enum.Enum):
    INVALID = "invalid"          # referenced doctor does not exist
    UNAVAILABLE = "unavailable"  # slot not offered or already taken
    VALID = "valid"

class TimeOfDay(str, enum.Enum):
    AM = "AM"
    PM = "PM"

def slot_label(moment: datetime) -> str:
    return moment.strftime("%H:%M")

def normalize_slots(times: Iterable[str]) -> List[str]:
    """Deduplicate slot labels and put them in catalog order.

    Raises ``InvalidError`` if any label is not part of the catalog.
    """
    requested = set(times)
    unknown = sorted(requested.difference(SLOT_CATALOG))
    if unknown:
        raise InvalidError(f"Unknown time slots: {', '.join(unknown)}")
    return [slot for slot in SLOT_CATALOG if slot in requested]

def offered_slots(doctor: Doctor) -> List[str]:
    """The catalog slots a doctor has opted into, in catalog order."""
    offered = set(doctor.available_times or [])
    return [slot for slot in SLOT_CATALOG if slot in offered]

def parse_time_of_day(period: str) -> TimeOfDay:
    try:
        return TimeOfDay(period.upper())
    except ValueError:
        raise InvalidError("Time filter must be AM or PM") from None

def matches_time_of_day(doctor: Doctor, period: str) -> bool:
    """True if the doctor offers at least one slot in the morning (AM) or afternoon (PM)."""
    period = parse_time_of_day(period)

    for slot in offered_slots(doctor):
        hour = int(slot.split(":")[0])
        if (period is TimeOfDay.AM and hour < 12) or (period is TimeOfDay.PM and hour >= 12):
            return True
    return False

class AvailabilityEngine:
    def __init__(self, db: Session):
        self.db = db
        self.doctors = DoctorRepository(db)
        self.appointments = AppointmentRepository(db)

    @storage_boundary
    def get_availability(
        self,
        doctor_id: int,
        day: date,
        exclude_appointment_id: Optional[int] = None
    ) -> List[str]:
        """Free slots of a doctor on a date, in catalog order.

        ``exclude_appointment_id`` leaves one appointment out of the
        occupancy set, so a booking being moved does not block itself.
        """
        doctor = self.doctors.find_by_id(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        return self._free_slots(doctor, day, exclude_appointment_id)

    @storage_boundary
    def validate_booking(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_appointment_id: Optional[int] = None
    ) -> BookingValidation:
        doctor = self.doctors.find_by_id(doctor_id)
        if doctor is None:
            return BookingValidation.INVALID

        free = self._free_slots(doctor, appointment_time.date(), exclude_appointment_id)
        # Slots start on the hour; 09:30 is never bookable
        if appointment_time.second or appointment_time.microsecond:
            return BookingValidation.UNAVAILABLE
        if slot_label(appointment_time) not in free:
            return BookingValidation.UNAVAILABLE
        return BookingValidation.VALID

    def _free_slots(
        self,
        doctor: Doctor,
        day: date,
        exclude_appointment_id: Optional[int]
    ) -> List[str]:
        occupied = {
            appointment.slot_label
            for appointment in self.appointments.find_by_doctor_on_day(doctor.id, day)
            if appointment.status != AppointmentStatus.CANCELLED
            and appointment.id != exclude_appointment_id
        }
        return [slot for slot in offered_slots(doctor) if slot not in occupied]
