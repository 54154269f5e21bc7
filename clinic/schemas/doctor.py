from pydantic import BaseModel, EmailStr, Field
from datetime import date
from typing import List, Optional

from .patient import PHONE_PATTERN

class DoctorBase(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    specialty: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    available_times: List[str] = Field(default_factory=list)

class DoctorCreate(DoctorBase):
    password: str = Field(..., min_length=6)

class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    specialty: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    password: Optional[str] = Field(None, min_length=6)
    available_times: Optional[List[str]] = None

class AvailableTimesUpdate(BaseModel):
    available_times: List[str]

class DoctorResponse(BaseModel):
    id: int
    name: str
    specialty: str
    email: str
    phone: str
    available_times: List[str]

    class Config:
        from_attributes = True

class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: date
    available_slots: List[str]
