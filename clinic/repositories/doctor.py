from sqlalchemy import func
from typing import List, Optional

from .base import BaseRepository
from ..models.doctor import Doctor

class DoctorRepository(BaseRepository[Doctor]):
    model = Doctor

    def find_by_email(self, email: str) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.email == email).first()

    def find_by_name_and_specialty(
        self,
        name: Optional[str] = None,
        specialty: Optional[str] = None
    ) -> List[Doctor]:
        """Case-insensitive name substring and exact specialty match; either may be omitted."""
        query = self.db.query(Doctor)
        if name:
            query = query.filter(Doctor.name.ilike(f"%{name}%"))
        if specialty:
            query = query.filter(func.lower(Doctor.specialty) == specialty.lower())
        return query.order_by(Doctor.id).all()
