from .user import User
from .category import Category
from .subcategory import Subcategory
from .post import Post, PostStatus

__all__ = [
    "User",
    "Category",
    "Subcategory",
    "Post",
    "PostStatus",
]
