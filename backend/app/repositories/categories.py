from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from app.models.category import Category
from app.models.subcategory import Subcategory
from app.models.post import Post


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def list(self, language: Optional[str] = None) -> List[Category]:
        query = self.db.query(Category).options(selectinload(Category.subcategories))
        if language:
            query = query.filter(Category.language == language)
        return query.order_by(Category.name).all()

    def find_by_name(
        self, name: str, language: str, exclude_id: Optional[str] = None
    ) -> Optional[Category]:
        query = self.db.query(Category).filter(
            Category.name == name, Category.language == language
        )
        if exclude_id:
            query = query.filter(Category.id != exclude_id)
        return query.first()

    def count_posts(self, category_id: str) -> int:
        return self.db.query(Post).filter(Post.category_id == category_id).count()

    def add(self, category: Category) -> Category:
        self.db.add(category)
        self.db.flush()
        return category

    def delete(self, category: Category) -> None:
        self.db.delete(category)
        self.db.flush()


class SubcategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, subcategory_id: str) -> Optional[Subcategory]:
        return (
            self.db.query(Subcategory).filter(Subcategory.id == subcategory_id).first()
        )

    def get_in_category(
        self, subcategory_id: str, category_id: str
    ) -> Optional[Subcategory]:
        """Fetch a subcategory only if it belongs to the given category."""
        return (
            self.db.query(Subcategory)
            .filter(
                Subcategory.id == subcategory_id,
                Subcategory.category_id == category_id,
            )
            .first()
        )

    def list_for_category(self, category_id: str) -> List[Subcategory]:
        return (
            self.db.query(Subcategory)
            .filter(Subcategory.category_id == category_id)
            .order_by(Subcategory.name)
            .all()
        )

    def find_by_name(
        self, name: str, category_id: str, exclude_id: Optional[str] = None
    ) -> Optional[Subcategory]:
        query = self.db.query(Subcategory).filter(
            Subcategory.name == name, Subcategory.category_id == category_id
        )
        if exclude_id:
            query = query.filter(Subcategory.id != exclude_id)
        return query.first()

    def count_posts(self, subcategory_id: str) -> int:
        return (
            self.db.query(Post).filter(Post.subcategory_id == subcategory_id).count()
        )

    def add(self, subcategory: Subcategory) -> Subcategory:
        self.db.add(subcategory)
        self.db.flush()
        return subcategory

    def delete(self, subcategory: Subcategory) -> None:
        self.db.delete(subcategory)
        self.db.flush()
