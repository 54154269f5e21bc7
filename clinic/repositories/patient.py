from sqlalchemy import or_
from typing import Optional

from .base import BaseRepository
from ..models.patient import Patient

class PatientRepository(BaseRepository[Patient]):
    model = Patient

    def find_by_email(self, email: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.email == email).first()

    def find_by_email_or_phone(self, email: str, phone: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(
            or_(Patient.email == email, Patient.phone == phone)
        ).first()
