from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.exceptions import ConflictError
from ...api.deps import (
    get_bearer_token, get_current_patient, get_token_service, get_validation_service
)
from ...models.patient import Patient
from ...services.patient_service import PatientService
from ...services.token_service import TokenService
from ...services.validation_service import ValidationService
from ...schemas.appointment import AppointmentResponse
from ...schemas.patient import PatientCreate, PatientResponse

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    patient_data: PatientCreate,
    db: Session = Depends(get_db),
    validation: ValidationService = Depends(get_validation_service),
    token_service: TokenService = Depends(get_token_service)
):
    """Patient signup."""
    if not validation.validate_patient(patient_data.email, patient_data.phone):
        raise ConflictError("Patient with email id or phone no already exist")
    return PatientService(db, token_service).create_patient(patient_data)

@router.get("/me", response_model=PatientResponse)
async def get_patient(
    _: Patient = Depends(get_current_patient),
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Details of the signed-in patient."""
    return PatientService(db, token_service).get_patient_details(token)

@router.get("/me/appointments", response_model=List[AppointmentResponse])
async def filter_my_appointments(
    condition: Optional[str] = None,
    doctor_name: Optional[str] = None,
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """The signed-in patient's appointments, filtered by past/future and doctor name."""
    appointments = PatientService(db, token_service).filter_appointments(
        current_patient, condition=condition, doctor_name=doctor_name
    )
    return [AppointmentResponse.from_appointment(a) for a in appointments]

@router.get("/{patient_id}/appointments", response_model=List[AppointmentResponse])
async def get_patient_appointments(
    patient_id: int,
    _: Patient = Depends(get_current_patient),
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """All appointments of a patient (that patient only)."""
    appointments = PatientService(db, token_service).get_patient_appointments(patient_id, token)
    return [AppointmentResponse.from_appointment(a) for a in appointments]
