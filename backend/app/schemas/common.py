from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional
from app.core.config import settings


class CamelModel(BaseModel):
    """Base schema exchanged with the client in camelCase."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class Pagination(CamelModel):
    page: int
    limit: int
    total_pages: int
    total_posts: int
    has_next_page: bool
    has_prev_page: bool


class MessageResponse(CamelModel):
    message: str


def validate_language(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if v not in settings.SUPPORTED_LANGUAGES:
        raise ValueError(
            f"Unsupported language '{v}'. Supported: {', '.join(settings.SUPPORTED_LANGUAGES)}"
        )
    return v


def validate_media_url(v: Optional[str]) -> Optional[str]:
    """Accept absolute http(s) URLs and paths served from the local media store."""
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if v.startswith(("http://", "https://", "/api/media/")):
        return v
    raise ValueError("Invalid URL")


def validate_name(v: str, label: str, max_length: int = 50) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{label} name is required")
    if len(v) > max_length:
        raise ValueError(f"{label} name must be less than {max_length} characters")
    return v


class UploadResponse(CamelModel):
    image_url: str
    public_id: str
    content_type: str
    size: int
