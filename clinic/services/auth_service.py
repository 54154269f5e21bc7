from sqlalchemy.orm import Session
import logging

from ..core.exceptions import UnauthorizedError
from ..core.security import DUMMY_PASSWORD_HASH, UserRole, verify_password
from ..repositories import AdminRepository, DoctorRepository, PatientRepository
from ..schemas.auth import LoginRequest, TokenResponse
from .base import storage_boundary
from .token_service import TokenService

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session, token_service: TokenService):
        self.db = db
        self.token_service = token_service
        self._lookups = {
            UserRole.ADMIN: AdminRepository(db).find_by_username,
            UserRole.DOCTOR: DoctorRepository(db).find_by_email,
            UserRole.PATIENT: PatientRepository(db).find_by_email,
        }

    @storage_boundary
    def login(self, role: UserRole, login_data: LoginRequest) -> TokenResponse:
        """Authenticate an admin, doctor or patient and return a token."""
        account = self._lookups[role](login_data.identifier)

        # Hash even when the account is missing so both failures take as long
        password_hash = account.password_hash if account else DUMMY_PASSWORD_HASH
        password_ok = verify_password(login_data.password, password_hash)

        if account is None or not password_ok:
            logger.info(f"Failed {role.value} login for '{login_data.identifier}'")
            detail = "Invalid username or password" if role is UserRole.ADMIN else "Invalid email or password"
            raise UnauthorizedError(detail)

        return TokenResponse(
            token=self.token_service.issue(login_data.identifier),
            role=role,
            expires_in=self.token_service.expires_in,
        )
