from pydantic import BaseModel
from typing import Optional

from ..core.security import UserRole

class LoginRequest(BaseModel):
    # Email for doctors and patients, username for admins
    identifier: str
    password: str

class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    role: UserRole
    expires_in: int

class TokenVerification(BaseModel):
    valid: bool
    role: UserRole
    identifier: Optional[str] = None

class MessageResponse(BaseModel):
    message: str
