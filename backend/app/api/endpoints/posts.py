from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging
from app.core.database import get_db
from app.core.auth import get_current_user, get_current_user_optional
from app.models.post import PostStatus
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.post import (
    PostCreate,
    PostUpdate,
    PostResponse,
    PostMessageResponse,
    PostListResponse,
    LeadPostResponse,
    SearchResponse,
    HomeFeedResponse,
    PublishResult,
    ScheduledOverview,
)
from app.services.lead_posts import LeadPostService
from app.services.posts import PostService
from app.services.scheduled_publisher import ScheduledPublisher
from app.api.validation import (
    paginate,
    validate_language_param,
    PageParam,
    LimitParam,
    LanguageParam,
    CategoryIdParam,
    SubcategoryIdParam,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=PostListResponse)
def get_posts(
    page: int = PageParam,
    limit: int = LimitParam,
    category_id: Optional[str] = CategoryIdParam,
    subcategory_id: Optional[str] = SubcategoryIdParam,
    author_id: Optional[str] = Query(None, alias="authorId", max_length=36),
    language: Optional[str] = LanguageParam,
    db: Session = Depends(get_db),
):
    """Published posts, newest first, with optional filters."""
    posts, total = PostService(db).list_published(
        page,
        limit,
        category_id=category_id,
        subcategory_id=subcategory_id,
        author_id=author_id,
        language=validate_language_param(language),
    )
    return {"posts": posts, "pagination": paginate(page, limit, total)}


@router.post("/", response_model=PostMessageResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a post; ``isLead`` replaces the current lead of the same language."""
    created = PostService(db).create(post, current_user)
    return {"message": "Post created successfully", "post": created}


@router.get("/mine", response_model=PostListResponse)
def get_my_posts(
    page: int = PageParam,
    limit: int = LimitParam,
    post_status: Optional[PostStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The current user's posts in every status (author dashboard)."""
    posts, total = PostService(db).list_for_author(
        current_user, page, limit, status=post_status
    )
    return {"posts": posts, "pagination": paginate(page, limit, total)}


@router.get("/lead", response_model=LeadPostResponse)
def get_lead_post(language: Optional[str] = LanguageParam, db: Session = Depends(get_db)):
    lead = PostService(db).get_lead(validate_language_param(language))
    return {"lead_post": lead}


@router.get("/by-language", response_model=PostListResponse)
def get_posts_by_language(
    language: str = Query(..., max_length=10),
    page: int = PageParam,
    limit: int = LimitParam,
    category_id: Optional[str] = CategoryIdParam,
    db: Session = Depends(get_db),
):
    posts, total = PostService(db).list_published(
        page,
        limit,
        language=validate_language_param(language),
        category_id=category_id,
    )
    return {"posts": posts, "pagination": paginate(page, limit, total)}


@router.get("/search", response_model=SearchResponse)
def search_posts(
    q: str = Query("", max_length=200),
    page: int = PageParam,
    limit: int = LimitParam,
    db: Session = Depends(get_db),
):
    """Case-insensitive search over title and content of published posts."""
    posts, total = PostService(db).search(q, page, limit)
    return {"query": q, "posts": posts, "pagination": paginate(page, limit, total)}


@router.get("/home", response_model=HomeFeedResponse)
def get_home_feed(
    language: Optional[str] = LanguageParam,
    posts_per_category: int = Query(4, alias="postsPerCategory", ge=1, le=20),
    db: Session = Depends(get_db),
):
    return PostService(db).home_feed(
        validate_language_param(language), posts_per_category=posts_per_category
    )


@router.post("/publish-scheduled", response_model=PublishResult)
def publish_scheduled_posts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Publish every scheduled post whose date has passed."""
    logger.info(
        "Manual scheduled publish triggered", extra={"user_id": current_user.id}
    )
    return ScheduledPublisher(db).publish_due_posts()


@router.get("/publish-scheduled", response_model=ScheduledOverview)
def get_scheduled_posts(db: Session = Depends(get_db)):
    """Scheduled posts with their due state, for monitoring."""
    return ScheduledPublisher(db).list_scheduled()


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    return {"post": PostService(db).get_visible(post_id, current_user)}


@router.put("/{post_id}", response_model=PostMessageResponse)
def update_post(
    post_id: str,
    post_update: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = PostService(db).update(post_id, post_update, current_user)
    return {"message": "Post updated successfully", "post": updated}


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PostService(db).delete(post_id, current_user)
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/set-lead", response_model=PostMessageResponse)
def set_lead_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Make a post the lead of its language, replacing the previous one."""
    post = LeadPostService(db).set_lead(post_id, current_user)
    return {"message": "Post set as lead successfully", "post": post}


@router.delete("/{post_id}/set-lead", response_model=PostMessageResponse)
def remove_lead_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = LeadPostService(db).clear_lead(post_id, current_user)
    return {"message": "Lead status removed successfully", "post": post}
