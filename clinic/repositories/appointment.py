from datetime import date, datetime, time
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload
from typing import List, Optional

from .base import BaseRepository
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.prescription import Prescription

def day_bounds(day: date):
    """Return the first and last instant of a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)

class AppointmentRepository(BaseRepository[Appointment]):
    model = Appointment

    def find_by_doctor_and_time_between(
        self,
        doctor_id: int,
        start: datetime,
        end: datetime
    ) -> List[Appointment]:
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient)
        ).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time.between(start, end)
        ).order_by(Appointment.appointment_time).all()

    def find_by_doctor_on_day(self, doctor_id: int, day: date) -> List[Appointment]:
        start, end = day_bounds(day)
        return self.find_by_doctor_and_time_between(doctor_id, start, end)

    def find_by_patient(
        self,
        patient_id: int,
        status: Optional[AppointmentStatus] = None,
        doctor_name: Optional[str] = None
    ) -> List[Appointment]:
        """Appointments of a patient, optionally narrowed by status and doctor name.

        With a status filter the result is ordered by appointment time,
        otherwise by id.
        """
        query = self.db.query(Appointment).options(
            joinedload(Appointment.doctor)
        ).filter(Appointment.patient_id == patient_id)

        if doctor_name:
            query = query.join(Appointment.doctor).filter(
                func.lower(Doctor.name).contains(doctor_name.lower())
            )

        if status is not None:
            query = query.filter(Appointment.status == int(status))
            return query.order_by(Appointment.appointment_time.asc()).all()

        return query.order_by(Appointment.id).all()

    def delete_all_by_doctor_id(self, doctor_id: int) -> int:
        """Delete a doctor's appointments along with their prescriptions.

        Nothing is committed; the caller commits or rolls back the whole
        transaction.
        """
        try:
            appointment_ids = [
                row.id for row in self.db.query(Appointment.id).filter(
                    Appointment.doctor_id == doctor_id
                )
            ]
            if appointment_ids:
                self.db.query(Prescription).filter(
                    Prescription.appointment_id.in_(appointment_ids)
                ).delete(synchronize_session=False)
                self.db.query(Appointment).filter(
                    Appointment.id.in_(appointment_ids)
                ).delete(synchronize_session=False)
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return len(appointment_ids)
