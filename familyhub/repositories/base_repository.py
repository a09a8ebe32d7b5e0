# familyhub/repositories/base_repository.py
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from familyhub.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)  # type: ignore


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.
    Extend this class for specific models.

    Every write commits immediately. A failed commit is rolled back before the
    error propagates so the session stays usable for the caller's next step
    (for example a compensating delete).
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get(self, id: Any) -> Optional[ModelType]:
        """Get a single record by primary key."""
        return self.db.get(self.model, id)

    def get_by(self, **kwargs) -> Optional[ModelType]:
        """Get a single record by arbitrary filters."""
        return self._filtered(**kwargs).first()

    def list(self, *, skip: int = 0, limit: int = 100, **filters) -> List[ModelType]:
        """Get multiple records with optional filtering."""
        return self._filtered(**filters).offset(skip).limit(limit).all()

    def create(self, obj_in: Union[Dict[str, Any], BaseModel]) -> ModelType:
        """Create a new record."""
        if isinstance(obj_in, BaseModel):
            obj_in_data = obj_in.model_dump()
        else:
            obj_in_data = obj_in

        db_obj = self.model(**obj_in_data)
        return self.save(db_obj)

    def update(
        self, db_obj: ModelType, obj_in: Union[Dict[str, Any], BaseModel]
    ) -> ModelType:
        """Update an existing record."""
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = obj_in

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        return self.save(db_obj)

    def delete(self, id: Any) -> bool:
        """Delete a record by ID."""
        obj = self.get(id)
        if not obj:
            return False
        self.db.delete(obj)
        self._commit()
        return True

    def delete_by(self, **filters) -> int:
        """Delete every record matching the filters. Returns the number removed."""
        count = self._filtered(**filters).delete(synchronize_session=False)
        self._commit()
        return count

    def save(self, obj: ModelType) -> ModelType:
        """Save an already instantiated model object."""
        self.db.add(obj)
        self._commit()
        self.db.refresh(obj)
        return obj

    def _filtered(self, **filters):
        query = self.db.query(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)
        return query

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
