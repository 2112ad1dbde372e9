import hashlib
import logging
import os
import tempfile
from pathlib import Path
import magic
from app.core.config import settings
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class ImageStore:
    """Local, content-addressed storage for post images under MEDIA_ROOT/images."""

    def __init__(self, media_root: str = None):
        self.images_dir = Path(media_root or settings.MEDIA_ROOT) / "images"

    def validate(self, content: bytes, declared_type: str = None) -> str:
        """
        Check size and real file type of an uploaded image.

        Returns:
            The MIME type detected from the magic bytes

        Raises:
            ValidationError: If the file is empty, too large or not an allowed image
        """
        if not content:
            raise ValidationError("No file provided")
        if len(content) > settings.MAX_IMAGE_SIZE:
            raise ValidationError(
                f"File too large. Maximum size is {settings.MAX_IMAGE_SIZE // (1024 * 1024)}MB"
            )

        if declared_type and declared_type.lower() not in settings.ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG, and WebP images are allowed"
            )

        # Validate actual file type using magic bytes
        mime_type = magic.from_buffer(content, mime=True)
        if mime_type not in settings.ALLOWED_IMAGE_TYPES:
            logger.warning(f"Rejected upload with detected type '{mime_type}'")
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG, and WebP images are allowed"
            )
        return mime_type

    def _write_atomic(self, filepath: Path, content: bytes) -> None:
        """Write to a temp file beside the target and rename it into place."""
        fd, tmp_path = tempfile.mkstemp(dir=self.images_dir, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_path, filepath)
        except OSError:
            os.unlink(tmp_path)
            raise

    def save(self, content: bytes, declared_type: str = None) -> dict:
        mime_type = self.validate(content, declared_type)

        self.images_dir.mkdir(parents=True, exist_ok=True)

        # Same bytes always map to the same file
        digest = hashlib.sha256(content).hexdigest()
        filename = f"{digest}{EXTENSIONS.get(mime_type, '.img')}"
        filepath = self.images_dir / filename

        if not filepath.exists():
            self._write_atomic(filepath, content)
            logger.info(
                f"Stored image {filename} ({len(content)} bytes, type: {mime_type})"
            )
        else:
            logger.debug(f"Image {filename} already stored")

        return {
            "image_url": f"/api/media/images/{filename}",
            "public_id": digest,
            "content_type": mime_type,
            "size": len(content),
        }
