from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional

PHONE_PATTERN = r"^\d{10}$"

class PatientCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    address: str = Field(..., max_length=255)

class PatientResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
