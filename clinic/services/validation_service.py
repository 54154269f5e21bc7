from datetime import datetime
from sqlalchemy.orm import Session
from typing import Optional

from ..core.exceptions import UnauthorizedError
from ..core.security import UserRole
from ..repositories import PatientRepository
from .availability import AvailabilityEngine, BookingValidation
from .base import storage_boundary
from .token_service import TokenService

class ValidationService:
    """Cross-cutting checks the routers run before handing off to a service."""

    def __init__(self, db: Session, token_service: TokenService):
        self.db = db
        self.token_service = token_service
        self.patients = PatientRepository(db)
        self.availability = AvailabilityEngine(db)

    def validate_token(self, token: Optional[str], role: UserRole):
        """Return the account behind a token, or raise if it is not valid for the role."""
        account = self.token_service.resolve(token, role) if token else None
        if account is None:
            raise UnauthorizedError("Invalid or expired token")
        return account

    def validate_appointment(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_appointment_id: Optional[int] = None
    ) -> BookingValidation:
        return self.availability.validate_booking(
            doctor_id, appointment_time, exclude_appointment_id=exclude_appointment_id
        )

    @storage_boundary
    def validate_patient(self, email: str, phone: str) -> bool:
        """True when neither the email nor the phone number is taken."""
        return self.patients.find_by_email_or_phone(email, phone) is None
