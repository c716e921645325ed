from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quickdesk.auth.dependencies import get_current_profile
from quickdesk.auth.models.profile import Profile
from quickdesk.db.session import get_db
from quickdesk.tickets.models.category import Category
from quickdesk.tickets.schemas.ticket import CategoryResponse
from quickdesk.tickets.services.category_service import CategoryRepository

router = APIRouter()


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(
    _current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[Category]:
    return CategoryRepository(db).list_active()
