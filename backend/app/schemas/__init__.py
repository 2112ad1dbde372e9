from app.schemas.common import Pagination, MessageResponse
from app.schemas.user import (
    User,
    UserRegister,
    UserLogin,
    AuthorSummary,
    RegisterResponse,
    TokenResponse,
)
from app.schemas.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    Subcategory,
    SubcategoryCreate,
    SubcategoryUpdate,
)
from app.schemas.post import (
    Post,
    PostCreate,
    PostUpdate,
    PostListResponse,
    PublishResult,
    ScheduledOverview,
)

__all__ = [
    "Pagination",
    "MessageResponse",
    "User",
    "UserRegister",
    "UserLogin",
    "AuthorSummary",
    "RegisterResponse",
    "TokenResponse",
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "Subcategory",
    "SubcategoryCreate",
    "SubcategoryUpdate",
    "Post",
    "PostCreate",
    "PostUpdate",
    "PostListResponse",
    "PublishResult",
    "ScheduledOverview",
]
