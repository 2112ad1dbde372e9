from pydantic import Field, field_validator
from datetime import datetime
from typing import List, Optional
from app.core.config import settings
from app.core.timeutils import to_naive_utc
from app.models.post import PostStatus
from app.schemas.common import (
    CamelModel,
    Pagination,
    validate_language,
    validate_media_url,
)
from app.schemas.category import CategorySummary, SubcategorySummary
from app.schemas.user import AuthorSummary


class _PostFields(CamelModel):
    @field_validator("title", check_fields=False)
    @classmethod
    def check_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("content", check_fields=False)
    @classmethod
    def check_content(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Content is required")
        return v

    @field_validator("language", check_fields=False)
    @classmethod
    def check_language(cls, v: Optional[str]) -> Optional[str]:
        return validate_language(v)

    @field_validator("image_url", "video_url", check_fields=False)
    @classmethod
    def check_urls(cls, v: Optional[str]) -> Optional[str]:
        return validate_media_url(v)

    @field_validator("scheduled_date", check_fields=False)
    @classmethod
    def normalize_scheduled_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class PostCreate(_PostFields):
    title: str = Field(max_length=200)
    content: str
    language: str = settings.DEFAULT_LANGUAGE
    category_id: str = Field(min_length=1)
    subcategory_id: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    is_lead: bool = False
    status: PostStatus = PostStatus.PUBLISHED
    scheduled_date: Optional[datetime] = None


class PostUpdate(_PostFields):
    """Partial update; explicit ``null`` clears the optional fields."""

    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = None
    language: Optional[str] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    is_lead: Optional[bool] = None
    status: Optional[PostStatus] = None
    scheduled_date: Optional[datetime] = None


class Post(CamelModel):
    id: str
    title: str
    content: str
    language: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    is_lead: bool
    status: PostStatus
    scheduled_date: Optional[datetime] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    author_id: str
    category_id: str
    subcategory_id: Optional[str] = None

    author: Optional[AuthorSummary] = None
    category: Optional[CategorySummary] = None
    subcategory: Optional[SubcategorySummary] = None


class PostResponse(CamelModel):
    post: Post


class PostMessageResponse(CamelModel):
    message: str
    post: Post


class PostListResponse(CamelModel):
    posts: List[Post]
    pagination: Pagination


class LeadPostResponse(CamelModel):
    lead_post: Optional[Post] = None


class SearchResponse(PostListResponse):
    query: str


class CategorySection(CamelModel):
    id: str
    name: str
    language: str
    post_count: int
    posts: List[Post]


class HomeFeedResponse(CamelModel):
    language: str
    lead_post: Optional[Post] = None
    categories: List[CategorySection]


class PublishedPostInfo(CamelModel):
    id: str
    title: str
    scheduled_date: Optional[datetime] = None


class PublishResult(CamelModel):
    message: str
    published_count: int
    published_posts: List[PublishedPostInfo] = []


class ScheduledPostInfo(PublishedPostInfo):
    created_at: datetime
    is_due: bool


class ScheduledOverview(CamelModel):
    current_time: datetime
    total_scheduled: int
    due_posts: int
    future_posts: int
    scheduled_posts: List[ScheduledPostInfo]
