from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from app.core.database import get_db
from app.core.auth import get_current_user
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryListResponse,
    SubcategoryCreate,
    SubcategoryResponse,
    SubcategoryListResponse,
)
from app.services.categories import CategoryService
from app.api.validation import validate_language_param, LanguageParam

router = APIRouter()


@router.get("/", response_model=CategoryListResponse)
def get_categories(language: Optional[str] = LanguageParam, db: Session = Depends(get_db)):
    """Categories of a language with their subcategories, ordered by name."""
    categories = CategoryService(db).list(validate_language_param(language))
    return {"categories": categories}


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a category; names are unique per language."""
    return {"category": CategoryService(db).create(category)}


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: str, db: Session = Depends(get_db)):
    return {"category": CategoryService(db).get(category_id)}


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"category": CategoryService(db).update(category_id, category_update)}


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a category and its subcategories. Refused while posts use it."""
    CategoryService(db).delete(category_id)
    return {"message": "Category deleted successfully"}


@router.get("/{category_id}/subcategories", response_model=SubcategoryListResponse)
def get_subcategories(category_id: str, db: Session = Depends(get_db)):
    service = CategoryService(db)
    subcategories = service.list_subcategories(category_id)
    return {"subcategories": subcategories, "category": service.get(category_id)}


@router.post(
    "/{category_id}/subcategories",
    response_model=SubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subcategory(
    category_id: str,
    subcategory: SubcategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a subcategory; names are unique within their category."""
    return {
        "subcategory": CategoryService(db).create_subcategory(category_id, subcategory)
    }
