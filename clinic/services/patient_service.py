from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.exceptions import InvalidError, NotFoundError, UnauthorizedError
from ..core.security import get_password_hash
from ..models.appointment import Appointment, AppointmentStatus
from ..models.patient import Patient
from ..repositories import PatientRepository
from ..schemas.patient import PatientCreate
from .appointment_service import AppointmentService
from .base import storage_boundary, storage_errors
from .token_service import TokenService

logger = logging.getLogger(__name__)

# "past" appointments are the completed ones, "future" the still scheduled ones
CONDITIONS = {
    "past": AppointmentStatus.COMPLETED,
    "future": AppointmentStatus.SCHEDULED,
}

class PatientService:
    def __init__(self, db: Session, token_service: TokenService):
        self.db = db
        self.token_service = token_service
        self.patients = PatientRepository(db)
        self.appointment_service = AppointmentService(db, token_service)

    @storage_boundary
    def create_patient(self, patient_data: PatientCreate) -> Patient:
        """Register a patient. Email and phone must both be unused."""
        patient = Patient(
            name=patient_data.name,
            email=patient_data.email,
            phone=patient_data.phone,
            address=patient_data.address,
            password_hash=get_password_hash(patient_data.password),
        )
        with storage_errors("Patient with email id or phone no already exist"):
            patient = self.patients.save(patient)

        logger.info(f"Registered patient {patient.id} ({patient.email})")
        return patient

    @storage_boundary
    def get_patient_details(self, token: str) -> Patient:
        email = self.token_service.extract_identifier(token)
        patient = self.patients.find_by_email(email)
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    @storage_boundary
    def get_patient_appointments(self, patient_id: int, token: str) -> List[Appointment]:
        """All appointments of a patient; only that patient may read them."""
        patient = self.patients.find_by_id(patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")

        email = self.token_service.extract_identifier(token)
        if patient.email != email:
            raise UnauthorizedError("Unauthorized access")

        return self.appointment_service.query_for_patient(patient.id)

    @storage_boundary
    def filter_appointments(
        self,
        patient: Patient,
        condition: Optional[str] = None,
        doctor_name: Optional[str] = None
    ) -> List[Appointment]:
        status = None
        if condition:
            status = CONDITIONS.get(condition.lower())
            if status is None:
                raise InvalidError("Invalid condition")
        return self.appointment_service.query_for_patient(
            patient.id, status=status, doctor_name=doctor_name
        )
