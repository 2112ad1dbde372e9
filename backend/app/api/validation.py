"""
Shared validation utilities for API endpoints.
Query parameter definitions and pagination helpers used by the routers.
"""

import math
from typing import Optional
from fastapi import Query
from app.core.config import settings
from app.core.errors import ValidationError
from app.schemas.common import Pagination

MAX_PAGE_SIZE = 100


def validate_language_param(language: Optional[str]) -> Optional[str]:
    """
    Normalize an optional language query parameter.

    Raises:
        ValidationError: If the language is not supported
    """
    if language is None:
        return None
    language = language.strip().lower()
    if language not in settings.SUPPORTED_LANGUAGES:
        raise ValidationError(
            f"Unsupported language '{language}'. Supported: {', '.join(settings.SUPPORTED_LANGUAGES)}"
        )
    return language


def paginate(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if total else 0
    return Pagination(
        page=page,
        limit=limit,
        total_pages=total_pages,
        total_posts=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


# Query parameter dependencies for common validations
PageParam = Query(1, ge=1, le=100000, description="Page number (1-based)")
LimitParam = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Items per page")
LanguageParam = Query(None, max_length=10, description="Language code filter")
CategoryIdParam = Query(None, alias="categoryId", max_length=36, description="Category ID filter")
SubcategoryIdParam = Query(None, alias="subcategoryId", max_length=36, description="Subcategory ID filter")
