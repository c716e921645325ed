from typing import Any, Generic, TypeVar, cast
from uuid import UUID

from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Lookups shared by the per-model repositories."""

    def __init__(self, db: Session, model: type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> ModelType | None:
        return self.find_one(self.model.id == entity_id)  # type: ignore[attr-defined]

    def find_one(self, *criteria: Any) -> ModelType | None:
        """First row matching all ``criteria``, or None."""
        return cast(ModelType | None, self.db.query(self.model).filter(*criteria).first())
