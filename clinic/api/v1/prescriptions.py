from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_doctor
from ...models.doctor import Doctor
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import PrescriptionCreate, PrescriptionResponse

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def save_prescription(
    prescription_data: PrescriptionCreate,
    _: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Write the prescription for an appointment."""
    return PrescriptionService(db).save_prescription(prescription_data)

@router.get("/{appointment_id}", response_model=PrescriptionResponse)
async def get_prescription(
    appointment_id: int,
    _: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """The prescription written for an appointment."""
    return PrescriptionService(db).get_prescription(appointment_id)
