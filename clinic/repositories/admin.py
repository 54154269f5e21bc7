from typing import Optional

from .base import BaseRepository
from ..models.admin import Admin

class AdminRepository(BaseRepository[Admin]):
    model = Admin

    def find_by_username(self, username: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.username == username).first()
