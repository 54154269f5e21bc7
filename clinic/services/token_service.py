from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from sqlalchemy.orm import Session
from typing import Callable, Dict, Optional, Union

from ..core.exceptions import TokenError
from ..core.security import UserRole
from ..models.admin import Admin
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..repositories import AdminRepository, DoctorRepository, PatientRepository
from .base import storage_boundary

Account = Union[Admin, Doctor, Patient]

def is_canonical(token: str) -> bool:
    """True if every segment of a compact token is canonical base64url.

    The spare low bits of each segment's final character must be zero.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        return all(
            base64url_encode(base64url_decode(segment.encode("ascii"))) == segment.encode("ascii")
            for segment in segments
        )
    except ValueError:
        return False

class TokenService:
    """Issues signed, time-limited identity tokens and resolves them per role.

    A token carries only its subject (an admin username or a doctor/patient
    email), the issue time and the expiry. Every validation re-reads the
    account from the database, so deleting an account invalidates its
    outstanding tokens straight away.
    """

    def __init__(
        self,
        db: Session,
        secret_key: str,
        algorithm: str = "HS256",
        expire_days: int = 7
    ):
        self.db = db
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_days = expire_days
        self._lookups: Dict[UserRole, Callable[[str], Optional[Account]]] = {
            UserRole.ADMIN: AdminRepository(db).find_by_username,
            UserRole.DOCTOR: DoctorRepository(db).find_by_email,
            UserRole.PATIENT: PatientRepository(db).find_by_email,
        }

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return int(timedelta(days=self.expire_days).total_seconds())

    def issue(self, identifier: str, now: Optional[datetime] = None) -> str:
        """Create a signed token for an account identifier."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": identifier,
            "iat": issued_at,
            "exp": issued_at + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def extract_identifier(self, token: str) -> str:
        """Return the token subject.

        Raises ``TokenError`` for a bad signature, a malformed or expired
        token, or a token without a subject.
        """
        if not is_canonical(token):
            raise TokenError()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise TokenError() from e

        identifier = payload.get("sub")
        if not identifier:
            raise TokenError("Invalid token payload")
        return identifier

    @storage_boundary
    def resolve(self, token: str, role: UserRole) -> Optional[Account]:
        """Return the live account behind a token for the given role, or None."""
        try:
            identifier = self.extract_identifier(token)
        except TokenError:
            return None
        return self._lookups[role](identifier)

    def validate(self, token: str, role: UserRole) -> bool:
        return self.resolve(token, role) is not None
