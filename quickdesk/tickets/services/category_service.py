from uuid import UUID

from sqlalchemy.orm import Session

from quickdesk.core.exceptions import ValidationError
from quickdesk.core.repository import BaseRepository
from quickdesk.tickets.models.category import Category


class CategoryRepository(BaseRepository[Category]):
    def __init__(self, db: Session):
        super().__init__(db, Category)

    def list_active(self) -> list[Category]:
        return (
            self.db.query(Category)
            .filter(Category.is_active == True)  # noqa: E712
            .order_by(Category.name)
            .all()
        )

    def get_active_or_error(self, category_id: UUID) -> Category:
        category = self.get_by_id(category_id)
        if category is None or not category.is_active:
            raise ValidationError("Selected category does not exist", field="category_id")
        return category
