from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    Boolean,
    ForeignKey,
    Index,
    Enum as SAEnum,
    func,
    select,
    text,
)
from sqlalchemy.orm import column_property, relationship
import enum
import uuid
from app.core.database import Base
from app.core.timeutils import utcnow


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        # At most one lead post per language
        Index(
            "uq_posts_lead_per_language",
            "language",
            unique=True,
            postgresql_where=text("is_lead"),
            sqlite_where=text("is_lead = 1"),
        ),
        Index("ix_posts_status_scheduled_date", "status", "scheduled_date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    subcategory_id = Column(
        String(36), ForeignKey("subcategories.id"), nullable=True, index=True
    )

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    language = Column(String(10), nullable=False, default="en", index=True)
    image_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)  # Podcast / YouTube embed

    is_lead = Column(Boolean, nullable=False, default=False)
    status = Column(
        SAEnum(
            PostStatus,
            name="post_status",
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=PostStatus.PUBLISHED,
    )
    scheduled_date = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    author = relationship("User", back_populates="posts")
    category = relationship("Category", back_populates="posts")
    subcategory = relationship("Subcategory", back_populates="posts")


# Post counts are loaded with the category/subcategory row
from app.models.category import Category  # noqa: E402
from app.models.subcategory import Subcategory  # noqa: E402

Category.post_count = column_property(
    select(func.count(Post.id))
    .where(Post.category_id == Category.id)
    .correlate_except(Post)
    .scalar_subquery()
)
Subcategory.post_count = column_property(
    select(func.count(Post.id))
    .where(Post.subcategory_id == Subcategory.id)
    .correlate_except(Post)
    .scalar_subquery()
)
