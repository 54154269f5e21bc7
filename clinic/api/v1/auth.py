from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import UserRole
from ...api.deps import (
    get_bearer_token, get_token_service, get_validation_service, rate_limit_check
)
from ...services.auth_service import AuthService
from ...services.token_service import TokenService
from ...services.validation_service import ValidationService
from ...schemas.auth import LoginRequest, TokenResponse, TokenVerification

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/{role}/login", response_model=TokenResponse)
async def login(
    role: UserRole,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
    _: None = Depends(rate_limit_check)
):
    """Authenticate an admin (username) or a doctor/patient (email) and return a token."""
    auth_service = AuthService(db, token_service)
    return auth_service.login(role, login_data)

@router.post("/verify-token", response_model=TokenVerification)
async def verify_token_endpoint(
    role: UserRole,
    token: str = Depends(get_bearer_token),
    validation: ValidationService = Depends(get_validation_service),
    token_service: TokenService = Depends(get_token_service)
):
    """Verify that a token is valid for a role and its account still exists."""
    validation.validate_token(token, role)
    return TokenVerification(
        valid=True,
        role=role,
        identifier=token_service.extract_identifier(token),
    )
