"""
Scheduled post publisher.

Promotes every ``scheduled`` post whose ``scheduled_date`` has passed to
``published`` in one transaction. Running it again with nothing new due is
a no-op, so the periodic job and the on-demand endpoint can overlap safely.
"""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.database import transaction
from app.core.errors import DatabaseError
from app.core.timeutils import utcnow
from app.repositories.posts import PostRepository
from app.schemas.post import (
    PublishResult,
    PublishedPostInfo,
    ScheduledOverview,
    ScheduledPostInfo,
)
from app.services.post_status import is_due

logger = logging.getLogger(__name__)


class ScheduledPublisher:
    def __init__(self, db: Session):
        self.db = db
        self.posts = PostRepository(db)

    def publish_due_posts(self, now: Optional[datetime] = None) -> PublishResult:
        """
        Publish all scheduled posts that are due.

        Args:
            now: Reference time (naive UTC); defaults to the current time

        Returns:
            PublishResult with the count and the promoted posts

        Raises:
            DatabaseError: If the batch could not be committed; nothing is
                promoted in that case and the call can simply be retried
        """
        now = now or utcnow()
        try:
            with transaction(self.db):
                due = self.posts.due_scheduled(now)
                promoted = [
                    PublishedPostInfo(
                        id=post.id, title=post.title, scheduled_date=post.scheduled_date
                    )
                    for post in due
                ]
                count = self.posts.mark_published([p.id for p in promoted], now)
        except SQLAlchemyError as e:
            logger.error(f"Failed to publish scheduled posts: {e}")
            raise DatabaseError("Failed to publish scheduled posts") from e

        if count == 0:
            return PublishResult(
                message="No scheduled posts due for publishing", published_count=0
            )

        logger.info(
            f"Published {count} scheduled posts",
            extra={"published_ids": [p.id for p in promoted]},
        )
        return PublishResult(
            message=f"Successfully published {count} scheduled posts",
            published_count=count,
            published_posts=promoted,
        )

    def list_scheduled(self, now: Optional[datetime] = None) -> ScheduledOverview:
        """Read-only overview of every scheduled post and whether it is due."""
        now = now or utcnow()
        scheduled = self.posts.list_scheduled()
        entries = [
            ScheduledPostInfo(
                id=post.id,
                title=post.title,
                scheduled_date=post.scheduled_date,
                created_at=post.created_at,
                is_due=is_due(post, now),
            )
            for post in scheduled
        ]
        due_count = sum(1 for entry in entries if entry.is_due)
        future_count = sum(
            1
            for entry in entries
            if entry.scheduled_date is not None and not entry.is_due
        )
        return ScheduledOverview(
            current_time=now,
            total_scheduled=len(entries),
            due_posts=due_count,
            future_posts=future_count,
            scheduled_posts=entries,
        )
