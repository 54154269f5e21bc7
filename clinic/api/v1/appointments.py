from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import (
    get_bearer_token, get_current_doctor, get_current_patient, get_token_service
)
from ...models.doctor import Doctor
from ...models.patient import Patient
from ...services.appointment_service import AppointmentService
from ...services.token_service import TokenService
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("", response_model=List[AppointmentResponse])
async def get_doctor_appointments(
    date: date,
    patient_name: Optional[str] = None,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """The signed-in doctor's appointments on a date."""
    appointments = AppointmentService(db, token_service).query_for_doctor(
        current_doctor.id, date, patient_name=patient_name
    )
    return [AppointmentResponse.from_appointment(a) for a in appointments]

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Book an appointment for the signed-in patient."""
    appointment = AppointmentService(db, token_service).book(
        current_patient, appointment_data.doctor_id, appointment_data.appointment_time
    )
    return AppointmentResponse.from_appointment(appointment)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Reschedule one of the signed-in patient's appointments."""
    appointment = AppointmentService(db, token_service).update(
        appointment_id,
        current_patient,
        appointment_data.appointment_time,
        doctor_id=appointment_data.doctor_id,
    )
    return AppointmentResponse.from_appointment(appointment)

@router.delete("/{appointment_id}", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    _: Patient = Depends(get_current_patient),
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Cancel one of the signed-in patient's appointments."""
    appointment = AppointmentService(db, token_service).cancel(appointment_id, token)
    return AppointmentResponse.from_appointment(appointment)

@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: int,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
):
    """Mark one of the signed-in doctor's appointments as completed."""
    appointment = AppointmentService(db, token_service).complete(appointment_id, current_doctor)
    return AppointmentResponse.from_appointment(appointment)
