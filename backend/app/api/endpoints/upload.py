from fastapi import APIRouter, Depends, File, Request, UploadFile
from app.core.auth import get_current_user
from app.core.config import settings
from app.core.logging_config import log_security_event, get_client_ip
from app.models.user import User
from app.schemas.common import UploadResponse
from app.services.image_upload import ImageStore

router = APIRouter()


@router.post("/", response_model=UploadResponse)
async def upload_image(
    request: Request,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
):
    """Upload a post image (JPEG, PNG or WebP, up to 5MB)."""
    # Read at most one byte past the size limit
    content = await file.read(settings.MAX_IMAGE_SIZE + 1)
    result = ImageStore().save(content, file.content_type)

    log_security_event(
        event_type="media.upload",
        message="Image uploaded",
        user_id=current_user.id,
        ip_address=get_client_ip(request),
        request_method="POST",
        request_path="/api/upload",
        event_category="media",
        public_id=result["public_id"],
        size=result["size"],
    )
    return result
