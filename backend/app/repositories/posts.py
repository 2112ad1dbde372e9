from datetime import datetime
from typing import Dict, List, Optional, Tuple
from sqlalchemy import desc, or_, func
from sqlalchemy.orm import Session, Query, joinedload
from app.models.post import Post, PostStatus


def _escape_like(term: str) -> str:
    return (
        term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


class PostRepository:
    """Query and command methods over the posts table."""

    def __init__(self, db: Session):
        self.db = db

    def _with_relations(self) -> Query:
        return self.db.query(Post).options(
            joinedload(Post.author),
            joinedload(Post.category),
            joinedload(Post.subcategory),
        )

    @staticmethod
    def _page(query: Query, page: int, limit: int) -> Tuple[List[Post], int]:
        total = query.order_by(None).count()
        items = (
            query.order_by(desc(Post.created_at), desc(Post.id))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def get(self, post_id: str) -> Optional[Post]:
        return self._with_relations().filter(Post.id == post_id).first()

    def get_for_update(self, post_id: str) -> Optional[Post]:
        """Fetch a post and lock its row until the transaction ends."""
        return (
            self.db.query(Post).filter(Post.id == post_id).with_for_update().first()
        )

    def add(self, post: Post) -> Post:
        self.db.add(post)
        self.db.flush()
        return post

    def delete(self, post: Post) -> None:
        self.db.delete(post)
        self.db.flush()

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[PostStatus] = PostStatus.PUBLISHED,
        category_id: Optional[str] = None,
        subcategory_id: Optional[str] = None,
        author_id: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Tuple[List[Post], int]:
        query = self._with_relations()
        if status is not None:
            query = query.filter(Post.status == status)
        if category_id:
            query = query.filter(Post.category_id == category_id)
        if subcategory_id:
            query = query.filter(Post.subcategory_id == subcategory_id)
        if author_id:
            query = query.filter(Post.author_id == author_id)
        if language:
            query = query.filter(Post.language == language)
        return self._page(query, page, limit)

    def search(self, term: str, page: int = 1, limit: int = 10) -> Tuple[List[Post], int]:
        """Case-insensitive substring match; the term is matched literally."""
        pattern = f"%{_escape_like(term.lower())}%"
        query = self._with_relations().filter(
            Post.status == PostStatus.PUBLISHED,
            or_(
                func.lower(Post.title).like(pattern, escape="\\"),
                func.lower(Post.content).like(pattern, escape="\\"),
            ),
        )
        return self._page(query, page, limit)

    def latest_in_category(self, category_id: str, limit: int) -> List[Post]:
        """Newest published non-lead posts of a category."""
        return (
            self._with_relations()
            .filter(
                Post.category_id == category_id,
                Post.status == PostStatus.PUBLISHED,
                Post.is_lead == False,
            )
            .order_by(desc(Post.created_at))
            .limit(limit)
            .all()
        )

    def published_counts(self, category_ids: List[str]) -> Dict[str, int]:
        """Published post count per category, in one grouped query."""
        if not category_ids:
            return {}
        rows = (
            self.db.query(Post.category_id, func.count(Post.id))
            .filter(
                Post.category_id.in_(category_ids),
                Post.status == PostStatus.PUBLISHED,
            )
            .group_by(Post.category_id)
            .all()
        )
        return {category_id: count for category_id, count in rows}

    # Lead posts

    def get_lead(self, language: Optional[str] = None) -> Optional[Post]:
        """Newest published lead post, for one language or any."""
        query = self._with_relations().filter(
            Post.is_lead == True, Post.status == PostStatus.PUBLISHED
        )
        if language:
            query = query.filter(Post.language == language)
        return query.order_by(desc(Post.updated_at)).first()

    def clear_leads(self, language: str, exclude_id: Optional[str] = None) -> int:
        """Unset ``is_lead`` on every post of ``language`` except ``exclude_id``.

        The competing rows are locked first so two concurrent lead changes for
        the same language serialize on PostgreSQL.
        """
        query = self.db.query(Post.id).filter(
            Post.language == language, Post.is_lead == True
        )
        if exclude_id:
            query = query.filter(Post.id != exclude_id)
        ids = [row.id for row in query.with_for_update().all()]
        if not ids:
            return 0
        return (
            self.db.query(Post)
            .filter(Post.id.in_(ids))
            .update({Post.is_lead: False}, synchronize_session="fetch")
        )

    def count_leads(self, language: str) -> int:
        return (
            self.db.query(Post)
            .filter(Post.language == language, Post.is_lead == True)
            .count()
        )

    # Scheduled publishing

    def list_scheduled(self) -> List[Post]:
        return (
            self.db.query(Post)
            .filter(Post.status == PostStatus.SCHEDULED)
            .order_by(Post.scheduled_date)
            .all()
        )

    def due_scheduled(self, now: datetime) -> List[Post]:
        """Scheduled posts whose date has passed, locked for the promotion."""
        return (
            self.db.query(Post)
            .filter(
                Post.status == PostStatus.SCHEDULED,
                Post.scheduled_date.isnot(None),
                Post.scheduled_date <= now,
            )
            .order_by(Post.scheduled_date)
            .with_for_update()
            .all()
        )

    def mark_published(self, post_ids: List[str], published_at: datetime) -> int:
        """Bulk status change; ``updated_at`` keeps its current value."""
        if not post_ids:
            return 0
        return (
            self.db.query(Post)
            .filter(Post.id.in_(post_ids), Post.status == PostStatus.SCHEDULED)
            .update(
                {
                    Post.status: PostStatus.PUBLISHED,
                    Post.published_at: published_at,
                    Post.updated_at: Post.updated_at,
                },
                synchronize_session=False,
            )
        )
