import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import transaction
from app.core.errors import ConflictError, NotFoundError
from app.models.category import Category
from app.models.subcategory import Subcategory
from app.repositories.categories import CategoryRepository, SubcategoryRepository
from app.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    SubcategoryCreate,
    SubcategoryUpdate,
)

logger = logging.getLogger(__name__)


class CategoryService:
    """Category and subcategory management with uniqueness and usage guards."""

    def __init__(self, db: Session):
        self.db = db
        self.categories = CategoryRepository(db)
        self.subcategories = SubcategoryRepository(db)

    def list(self, language: Optional[str] = None) -> List[Category]:
        return self.categories.list(language or settings.DEFAULT_LANGUAGE)

    def get(self, category_id: str) -> Category:
        category = self.categories.get(category_id)
        if not category:
            raise NotFoundError("The requested category does not exist")
        return category

    def create(self, data: CategoryCreate) -> Category:
        with transaction(self.db):
            if self.categories.find_by_name(data.name, data.language):
                raise ConflictError(
                    "A category with this name already exists for this language"
                )
            category = self.categories.add(
                Category(name=data.name, language=data.language)
            )
        logger.info(
            f"Category created: {category.name} ({category.language})",
            extra={"category_id": category.id},
        )
        return category

    def update(self, category_id: str, data: CategoryUpdate) -> Category:
        with transaction(self.db):
            category = self.get(category_id)
            if self.categories.find_by_name(
                data.name, category.language, exclude_id=category.id
            ):
                raise ConflictError(
                    "A category with this name already exists for this language"
                )
            category.name = data.name
        return category

    def delete(self, category_id: str) -> None:
        with transaction(self.db):
            category = self.get(category_id)
            if self.categories.count_posts(category.id) > 0:
                raise ConflictError(
                    "Cannot delete category that has posts assigned to it"
                )
            self.categories.delete(category)
        logger.info("Category deleted", extra={"category_id": category_id})

    # Subcategories

    def list_subcategories(self, category_id: str) -> List[Subcategory]:
        self.get(category_id)
        return self.subcategories.list_for_category(category_id)

    def get_subcategory(self, subcategory_id: str) -> Subcategory:
        subcategory = self.subcategories.get(subcategory_id)
        if not subcategory:
            raise NotFoundError("The requested subcategory does not exist")
        return subcategory

    def create_subcategory(self, category_id: str, data: SubcategoryCreate) -> Subcategory:
        with transaction(self.db):
            category = self.get(category_id)
            if self.subcategories.find_by_name(data.name, category.id):
                raise ConflictError(
                    "A subcategory with this name already exists in this category"
                )
            subcategory = self.subcategories.add(
                Subcategory(name=data.name, category_id=category.id)
            )
        logger.info(
            f"Subcategory created: {subcategory.name}",
            extra={"subcategory_id": subcategory.id, "category_id": category_id},
        )
        return subcategory

    def update_subcategory(
        self, subcategory_id: str, data: SubcategoryUpdate
    ) -> Subcategory:
        with transaction(self.db):
            subcategory = self.get_subcategory(subcategory_id)
            if self.subcategories.find_by_name(
                data.name, subcategory.category_id, exclude_id=subcategory.id
            ):
                raise ConflictError(
                    "A subcategory with this name already exists in this category"
                )
            subcategory.name = data.name
        return subcategory

    def delete_subcategory(self, subcategory_id: str) -> None:
        with transaction(self.db):
            subcategory = self.get_subcategory(subcategory_id)
            if self.subcategories.count_posts(subcategory.id) > 0:
                raise ConflictError(
                    "Cannot delete subcategory that has posts assigned to it"
                )
            self.subcategories.delete(subcategory)
        logger.info("Subcategory deleted", extra={"subcategory_id": subcategory_id})
