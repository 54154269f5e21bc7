from typing import Optional

from .base import BaseRepository
from ..models.prescription import Prescription

class PrescriptionRepository(BaseRepository[Prescription]):
    model = Prescription

    def find_by_appointment_id(self, appointment_id: int) -> Optional[Prescription]:
        return self.db.query(Prescription).filter(
            Prescription.appointment_id == appointment_id
        ).first()

