from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import UnauthorizedError
from ..core.security import security, UserRole
from ..models.admin import Admin
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..services.token_service import TokenService
from ..services.validation_service import ValidationService

def get_token_service(db: Session = Depends(get_db)) -> TokenService:
    """Token service bound to the request's session and the configured secret."""
    return TokenService(
        db,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_days=settings.TOKEN_EXPIRE_DAYS,
    )

def get_validation_service(
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
) -> ValidationService:
    return ValidationService(db, token_service)

async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Extract the raw token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authenticated")
    return credentials.credentials

# Role-based access control dependencies
def require_role(role: UserRole):
    """Create a dependency that resolves the caller's account for one role.

    The token is re-checked against the database on every request, so a
    deleted account is rejected even while its token has not expired.
    """
    async def role_checker(
        token: str = Depends(get_bearer_token),
        validation: ValidationService = Depends(get_validation_service)
    ):
        return validation.validate_token(token, role)

    return role_checker

# Specific role dependencies
async def get_current_admin(
    admin: Admin = Depends(require_role(UserRole.ADMIN))
) -> Admin:
    """Require admin role."""
    return admin

async def get_current_doctor(
    doctor: Doctor = Depends(require_role(UserRole.DOCTOR))
) -> Doctor:
    """Require doctor role."""
    return doctor

async def get_current_patient(
    patient: Patient = Depends(require_role(UserRole.PATIENT))
) -> Patient:
    """Require patient role."""
    return patient

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for login endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)  # one hour window
    else:
        if int(current_requests) >= settings.LOGIN_RATE_LIMIT:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
