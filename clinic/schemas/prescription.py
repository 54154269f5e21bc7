from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class PrescriptionCreate(BaseModel):
    appointment_id: int
    patient_name: str = Field(..., min_length=3, max_length=100)
    medication: str = Field(..., min_length=3, max_length=100)
    dosage: str = Field(..., min_length=1, max_length=100)
    doctor_notes: Optional[str] = Field(None, max_length=200)

class PrescriptionResponse(BaseModel):
    id: int
    appointment_id: int
    patient_name: str
    medication: str
    dosage: str
    doctor_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
