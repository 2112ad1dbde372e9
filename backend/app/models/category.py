from sqlalchemy import Column, String, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base
from app.core.timeutils import utcnow


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("name", "language", name="uq_categories_name_language"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), nullable=False, index=True)
    language = Column(String(10), nullable=False, default="en", index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    subcategories = relationship(
        "Subcategory",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Subcategory.name",
    )
    posts = relationship("Post", back_populates="category")
