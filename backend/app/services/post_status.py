"""
Post publication state machine.

States move forward only: ``draft -> scheduled -> published`` with a
direct ``draft -> published`` shortcut. A scheduled post may be
rescheduled. Promotion of due scheduled posts is done in bulk by the
scheduled publisher.
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional
from app.core.errors import ValidationError
from app.core.timeutils import utcnow
from app.models.post import Post, PostStatus

ALLOWED_TRANSITIONS: Dict[PostStatus, FrozenSet[PostStatus]] = {
    PostStatus.DRAFT: frozenset(
        {PostStatus.DRAFT, PostStatus.SCHEDULED, PostStatus.PUBLISHED}
    ),
    PostStatus.SCHEDULED: frozenset({PostStatus.SCHEDULED, PostStatus.PUBLISHED}),
    PostStatus.PUBLISHED: frozenset({PostStatus.PUBLISHED}),
}


def can_transition(current: PostStatus, target: PostStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_due(post: Post, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    return (
        post.status == PostStatus.SCHEDULED
        and post.scheduled_date is not None
        and post.scheduled_date <= now
    )


def _check_schedule(scheduled_date: Optional[datetime], now: datetime) -> None:
    if scheduled_date is None:
        raise ValidationError("A scheduled post requires a scheduled date")
    if scheduled_date <= now:
        raise ValidationError("Scheduled date must be in the future")


def apply_initial_status(
    post: Post,
    status: PostStatus,
    scheduled_date: Optional[datetime],
    now: Optional[datetime] = None,
) -> None:
    """Set the status of a post that is being created."""
    now = now or utcnow()
    if status == PostStatus.SCHEDULED:
        _check_schedule(scheduled_date, now)
        post.scheduled_date = scheduled_date
    else:
        post.scheduled_date = scheduled_date if status == PostStatus.DRAFT else None
    if status == PostStatus.PUBLISHED:
        post.published_at = now
    post.status = status


def apply_status_change(
    post: Post,
    target: Optional[PostStatus],
    scheduled_date: Optional[datetime],
    date_given: bool,
    now: Optional[datetime] = None,
) -> None:
    """Apply an author-requested status and/or schedule change to a post.

    ``date_given`` tells an explicit ``scheduledDate`` apart from an absent
    one, so a scheduled post can be rescheduled without repeating its status.
    """
    now = now or utcnow()
    current = PostStatus(post.status)
    target = target or current

    if not can_transition(current, target):
        raise ValidationError(
            f"Cannot change status from '{current.value}' to '{target.value}'"
        )

    if target == PostStatus.SCHEDULED:
        new_date = scheduled_date if date_given else post.scheduled_date
        if current != PostStatus.SCHEDULED or date_given:
            _check_schedule(new_date, now)
        post.scheduled_date = new_date
    elif target == PostStatus.PUBLISHED:
        if current != PostStatus.PUBLISHED:
            post.published_at = now
    elif date_given:
        post.scheduled_date = scheduled_date

    post.status = target
