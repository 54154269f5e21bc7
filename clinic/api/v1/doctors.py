from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_admin, get_current_doctor
from ...models.admin import Admin
from ...models.doctor import Doctor
from ...services.doctor_service import DoctorService
from ...schemas.auth import MessageResponse
from ...schemas.doctor import (
    AvailabilityResponse, AvailableTimesUpdate, DoctorCreate, DoctorResponse, DoctorUpdate
)

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=List[DoctorResponse])
async def list_doctors(db: Session = Depends(get_db)):
    """List all doctors."""
    return DoctorService(db).get_doctors()

@router.get("/search", response_model=List[DoctorResponse])
async def search_doctors(
    name: Optional[str] = None,
    specialty: Optional[str] = None,
    time: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Filter doctors by name, specialty and AM/PM availability."""
    return DoctorService(db).filter_doctors(name=name, specialty=specialty, time_of_day=time)

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: int,
    date: date,
    db: Session = Depends(get_db)
):
    """Free slots of a doctor on a date."""
    slots = DoctorService(db).get_doctor_availability(doctor_id, date)
    return AvailabilityResponse(doctor_id=doctor_id, date=date, available_slots=slots)

@router.put("/me/available-times", response_model=DoctorResponse)
async def update_my_available_times(
    times: AvailableTimesUpdate,
    current_doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Replace the slots the signed-in doctor offers."""
    return DoctorService(db).update_available_times(current_doctor, times.available_times)

@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_data: DoctorCreate,
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Register a doctor (admin only)."""
    return DoctorService(db).save_doctor(doctor_data)

@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Update a doctor's profile (admin only)."""
    return DoctorService(db).update_doctor(doctor_id, doctor_data)

@router.delete("/{doctor_id}", response_model=MessageResponse)
async def delete_doctor(
    doctor_id: int,
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Delete a doctor and all of their appointments (admin only)."""
    DoctorService(db).delete_doctor(doctor_id)
    return {"message": "Doctor deleted successfully"}
