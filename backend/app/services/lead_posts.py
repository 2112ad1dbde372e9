"""
Lead post management.

Each language has at most one lead (featured) post. Making a post the lead
clears the flag on the previous lead of the same language inside the same
transaction, so no committed state ever carries two leads for a language.
"""

import logging
from sqlalchemy.orm import Session
from app.core.database import transaction
from app.core.errors import AuthorizationError, NotFoundError
from app.models.post import Post
from app.models.user import User
from app.repositories.posts import PostRepository

logger = logging.getLogger(__name__)


class LeadPostService:
    def __init__(self, db: Session):
        self.db = db
        self.posts = PostRepository(db)

    def promote(self, post: Post) -> int:
        """Make ``post`` the lead of its language without committing.

        Used by set_lead and by post create/update so the clear and the set
        share the caller's transaction. Returns how many previous leads were
        cleared.
        """
        cleared = self.posts.clear_leads(post.language, exclude_id=post.id)
        post.is_lead = True
        self.db.flush()
        if cleared:
            logger.info(
                f"Replaced {cleared} lead post(s) for language '{post.language}'",
                extra={"post_id": post.id, "language": post.language},
            )
        return cleared

    def _get_owned(self, post_id: str, actor: User) -> Post:
        post = self.posts.get_for_update(post_id)
        if not post:
            raise NotFoundError("The requested post does not exist")
        if post.author_id != actor.id:
            raise AuthorizationError("You can only manage the lead status of your own posts")
        return post

    def set_lead(self, post_id: str, actor: User) -> Post:
        with transaction(self.db):
            post = self._get_owned(post_id, actor)
            self.promote(post)
        logger.info(
            "Post set as lead",
            extra={"post_id": post_id, "user_id": actor.id},
        )
        return self.posts.get(post_id)

    def clear_lead(self, post_id: str, actor: User) -> Post:
        with transaction(self.db):
            post = self._get_owned(post_id, actor)
            post.is_lead = False
        logger.info(
            "Lead status removed",
            extra={"post_id": post_id, "user_id": actor.id},
        )
        return self.posts.get(post_id)
