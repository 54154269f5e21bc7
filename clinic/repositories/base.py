from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Generic, List, Optional, Type, TypeVar

from ..core.database import Base

ModelType = TypeVar("ModelType", bound=Base)

class BaseRepository(Generic[ModelType]):
    """Persistence for one entity type over a SQLAlchemy session.

    Writes commit immediately. On a storage failure the session is rolled
    back and the SQLAlchemy exception propagates to the calling service.
    """

    model: Type[ModelType]

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, entity_id: int) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def find_all(self) -> List[ModelType]:
        return self.db.query(self.model).order_by(self.model.id).all()

    def save(self, entity: ModelType) -> ModelType:
        """Insert or update an entity."""
        try:
            self.db.add(entity)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelType) -> None:
        try:
            self.db.delete(entity)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def delete_by_id(self, entity_id: int) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True
