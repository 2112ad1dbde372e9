"""
Post authoring and reader queries.

Create and update run in a single transaction that also covers category and
subcategory checks and the lead-post hand-over.
"""

import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import transaction
from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.category import Category
from app.models.post import Post, PostStatus
from app.models.user import User
from app.repositories.categories import CategoryRepository, SubcategoryRepository
from app.repositories.posts import PostRepository
from app.schemas.post import PostCreate, PostUpdate
from app.services.lead_posts import LeadPostService
from app.services.post_status import apply_initial_status, apply_status_change

logger = logging.getLogger(__name__)

# Home page section order; Bengali category names map onto their English counterparts
CATEGORY_ORDER = ["Creative", "Culture", "Non-Fiction", "Research", "Podcast"]
CATEGORY_NAMES_BN = {
    "ক্রিয়েটিভ": "Creative",
    "কালচার": "Culture",
    "নন-ফিকশন": "Non-Fiction",
    "রিসার্চ": "Research",
    "পডকাস্ট": "Podcast",
}
PODCAST_CATEGORY = "Podcast"


def canonical_category_name(name: str) -> str:
    return CATEGORY_NAMES_BN.get(name, name)


def _section_order(category: Category):
    name = canonical_category_name(category.name)
    rank = CATEGORY_ORDER.index(name) if name in CATEGORY_ORDER else len(CATEGORY_ORDER)
    return rank, category.name


class PostService:
    def __init__(self, db: Session):
        self.db = db
        self.posts = PostRepository(db)
        self.categories = CategoryRepository(db)
        self.subcategories = SubcategoryRepository(db)
        self.leads = LeadPostService(db)

    # Validation helpers

    def _require_category(self, category_id: str) -> Category:
        category = self.categories.get(category_id)
        if not category:
            raise NotFoundError("The selected category does not exist")
        return category

    def _check_subcategory(self, subcategory_id: Optional[str], category_id: str) -> None:
        if not subcategory_id:
            return
        if not self.subcategories.get_in_category(subcategory_id, category_id):
            raise ValidationError(
                "The selected subcategory does not exist or does not belong to the selected category"
            )

    @staticmethod
    def _check_language(category: Category, language: str) -> None:
        if category.language != language:
            raise ValidationError(
                f"The selected category belongs to language '{category.language}', not '{language}'"
            )

    def _get_owned(self, post_id: str, actor: User, action: str) -> Post:
        post = self.posts.get(post_id)
        if not post:
            raise NotFoundError("The requested post does not exist")
        if post.author_id != actor.id:
            raise AuthorizationError(f"You can only {action} your own posts")
        return post

    # Commands

    def create(self, data: PostCreate, author: User) -> Post:
        with transaction(self.db):
            category = self._require_category(data.category_id)
            self._check_language(category, data.language)
            self._check_subcategory(data.subcategory_id, category.id)

            post = Post(
                title=data.title,
                content=data.content,
                language=data.language,
                image_url=data.image_url,
                video_url=data.video_url,
                author_id=author.id,
                category_id=category.id,
                subcategory_id=data.subcategory_id,
                is_lead=False,
            )
            apply_initial_status(post, data.status, data.scheduled_date)
            self.posts.add(post)

            if data.is_lead:
                self.leads.promote(post)

        logger.info(
            "Post created",
            extra={"post_id": post.id, "user_id": author.id, "status": post.status.value},
        )
        return self.posts.get(post.id)

    def update(self, post_id: str, data: PostUpdate, actor: User) -> Post:
        changes = data.model_dump(exclude_unset=True)

        with transaction(self.db):
            post = self._get_owned(post_id, actor, "update")

            for field in ("title", "content"):
                if changes.get(field) is not None:
                    setattr(post, field, changes[field])
            for field in ("image_url", "video_url"):
                if field in changes:
                    setattr(post, field, changes[field])

            if changes.get("language") is not None:
                post.language = changes["language"]

            category_changed = (
                changes.get("category_id") is not None
                and changes["category_id"] != post.category_id
            )
            if changes.get("category_id") is not None:
                post.category_id = self._require_category(changes["category_id"]).id

            if "subcategory_id" in changes:
                post.subcategory_id = changes["subcategory_id"]
            elif category_changed and post.subcategory_id:
                if not self.subcategories.get_in_category(
                    post.subcategory_id, post.category_id
                ):
                    post.subcategory_id = None

            category = self._require_category(post.category_id)
            self._check_language(category, post.language)
            self._check_subcategory(post.subcategory_id, post.category_id)

            if "status" in changes or "scheduled_date" in changes:
                apply_status_change(
                    post,
                    changes.get("status"),
                    changes.get("scheduled_date"),
                    date_given="scheduled_date" in changes,
                )

            if changes.get("is_lead") is True:
                self.leads.promote(post)
            elif changes.get("is_lead") is False:
                post.is_lead = False
            elif post.is_lead and changes.get("language") is not None:
                # A lead that moves to another language takes over that language
                self.leads.promote(post)

        self.db.expire_all()
        logger.info("Post updated", extra={"post_id": post_id, "user_id": actor.id})
        return self.posts.get(post_id)

    def delete(self, post_id: str, actor: User) -> None:
        with transaction(self.db):
            post = self._get_owned(post_id, actor, "delete")
            self.posts.delete(post)
        logger.info("Post deleted", extra={"post_id": post_id, "user_id": actor.id})

    # Queries

    def get_visible(self, post_id: str, viewer: Optional[User] = None) -> Post:
        """Published posts are public; anything else only for its author."""
        post = self.posts.get(post_id)
        if not post:
            raise NotFoundError("The requested post does not exist")
        if post.status != PostStatus.PUBLISHED and (
            viewer is None or viewer.id != post.author_id
        ):
            raise NotFoundError("The requested post does not exist")
        return post

    def list_published(self, page: int, limit: int, **filters) -> Tuple[List[Post], int]:
        return self.posts.list(page=page, limit=limit, **filters)

    def list_for_author(
        self, author: User, page: int, limit: int, status: Optional[PostStatus] = None
    ) -> Tuple[List[Post], int]:
        return self.posts.list(page=page, limit=limit, status=status, author_id=author.id)

    def search(self, query: str, page: int, limit: int) -> Tuple[List[Post], int]:
        if not query.strip():
            return [], 0
        return self.posts.search(query.strip(), page=page, limit=limit)

    def get_lead(self, language: Optional[str] = None) -> Optional[Post]:
        return self.posts.get_lead(language)

    def home_feed(self, language: Optional[str], posts_per_category: int = 4) -> dict:
        """Lead post plus the newest posts of every category of a language."""
        language = language or settings.DEFAULT_LANGUAGE
        categories = sorted(self.categories.list(language), key=_section_order)
        counts = self.posts.published_counts([category.id for category in categories])
        sections = []
        for category in categories:
            is_podcast = canonical_category_name(category.name) == PODCAST_CATEGORY
            limit = 1 if is_podcast else posts_per_category
            posts = self.posts.latest_in_category(category.id, limit)
            if not posts:
                continue
            sections.append(
                {
                    "id": category.id,
                    "name": category.name,
                    "language": category.language,
                    "post_count": counts.get(category.id, 0),
                    "posts": posts,
                }
            )
        return {
            "language": language,
            "lead_post": self.posts.get_lead(language),
            "categories": sections,
        }
