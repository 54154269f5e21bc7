from sqlalchemy.orm import Session
import logging

from ..core.config import Settings
from ..core.exceptions import ConflictError
from ..core.security import get_password_hash
from ..models.admin import Admin
from ..repositories import AdminRepository
from .base import storage_boundary, storage_errors

logger = logging.getLogger(__name__)

class AdminService:
    def __init__(self, db: Session):
        self.db = db
        self.admins = AdminRepository(db)

    @storage_boundary
    def create_admin(self, username: str, password: str) -> Admin:
        if self.admins.find_by_username(username):
            raise ConflictError("Admin already exists")

        admin = Admin(username=username, password_hash=get_password_hash(password))
        with storage_errors("Admin already exists"):
            return self.admins.save(admin)

    @storage_boundary
    def ensure_default_admin(self, settings: Settings) -> None:
        """Create the configured bootstrap admin if it does not exist yet."""
        if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
            return
        if self.admins.find_by_username(settings.ADMIN_USERNAME):
            return

        self.create_admin(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
        logger.info(f"Created bootstrap admin '{settings.ADMIN_USERNAME}'")
