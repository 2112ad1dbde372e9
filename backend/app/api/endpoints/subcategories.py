from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.auth import get_current_user
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.category import SubcategoryUpdate, SubcategoryResponse
from app.services.categories import CategoryService

router = APIRouter()


@router.get("/{subcategory_id}", response_model=SubcategoryResponse)
def get_subcategory(subcategory_id: str, db: Session = Depends(get_db)):
    return {"subcategory": CategoryService(db).get_subcategory(subcategory_id)}


@router.put("/{subcategory_id}", response_model=SubcategoryResponse)
def update_subcategory(
    subcategory_id: str,
    subcategory_update: SubcategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subcategory = CategoryService(db).update_subcategory(
        subcategory_id, subcategory_update
    )
    return {"subcategory": subcategory}


@router.delete("/{subcategory_id}", response_model=MessageResponse)
def delete_subcategory(
    subcategory_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a subcategory. Refused while posts use it."""
    CategoryService(db).delete_subcategory(subcategory_id)
    return {"message": "Subcategory deleted successfully"}
