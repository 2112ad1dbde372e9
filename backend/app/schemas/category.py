from pydantic import field_validator
from datetime import datetime
from typing import List, Optional
from app.core.config import settings
from app.schemas.common import CamelModel, validate_language, validate_name


class CategoryCreate(CamelModel):
    name: str
    language: str = settings.DEFAULT_LANGUAGE

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v, "Category")

    @field_validator("language")
    @classmethod
    def check_language(cls, v: str) -> str:
        return validate_language(v)


class CategoryUpdate(CamelModel):
    name: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v, "Category")


class SubcategoryCreate(CamelModel):
    name: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v, "Subcategory")


class SubcategoryUpdate(SubcategoryCreate):
    pass


class CategorySummary(CamelModel):
    id: str
    name: str


class SubcategorySummary(CamelModel):
    id: str
    name: str


class Subcategory(CamelModel):
    id: str
    name: str
    category_id: str
    post_count: int = 0
    created_at: datetime


class Category(CamelModel):
    id: str
    name: str
    language: str
    post_count: int = 0
    created_at: datetime
    subcategories: List[Subcategory] = []


class CategoryResponse(CamelModel):
    category: Category


class CategoryListResponse(CamelModel):
    categories: List[Category]


class SubcategoryResponse(CamelModel):
    subcategory: Subcategory


class SubcategoryListResponse(CamelModel):
    subcategories: List[Subcategory]
    category: Optional[CategorySummary] = None
