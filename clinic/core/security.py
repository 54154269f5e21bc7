from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from enum import Enum

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token scheme; auto_error is off so a missing header maps to our 401
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

# Used when an account lookup misses, so failed logins cost the same
# as a real hash comparison
DUMMY_PASSWORD_HASH = get_password_hash("clinic-dummy-password")
