from sqlalchemy.orm import Session
import logging

from ..core.exceptions import ConflictError, NotFoundError
from ..models.prescription import Prescription
from ..repositories import AppointmentRepository, PrescriptionRepository
from ..schemas.prescription import PrescriptionCreate
from .base import storage_boundary, storage_errors

logger = logging.getLogger(__name__)

PRESCRIPTION_EXISTS = "Prescription already exists for this appointment"

class PrescriptionService:
    def __init__(self, db: Session):
        self.db = db
        self.prescriptions = PrescriptionRepository(db)
        self.appointments = AppointmentRepository(db)

    @storage_boundary
    def save_prescription(self, prescription_data: PrescriptionCreate) -> Prescription:
        """Attach a prescription to an appointment. An existing one is never replaced."""
        if self.appointments.find_by_id(prescription_data.appointment_id) is None:
            raise NotFoundError("Appointment not found")
        if self.prescriptions.find_by_appointment_id(prescription_data.appointment_id):
            raise ConflictError(PRESCRIPTION_EXISTS)

        prescription = Prescription(**prescription_data.model_dump())
        with storage_errors(PRESCRIPTION_EXISTS, "Error saving prescription"):
            prescription = self.prescriptions.save(prescription)

        logger.info(f"Saved prescription for appointment {prescription.appointment_id}")
        return prescription

    @storage_boundary
    def get_prescription(self, appointment_id: int) -> Prescription:
        prescription = self.prescriptions.find_by_appointment_id(appointment_id)
        if prescription is None:
            raise NotFoundError("Prescription not found for this appointment")
        return prescription
