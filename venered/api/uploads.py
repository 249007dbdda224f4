from fastapi import APIRouter, Depends, File, Request, UploadFile
import logging

from venered.config import settings
from venered.schemas.auth_schema import AuthContext
from venered.services.auth_service import get_auth_context
from venered.utils.errors import to_http
from venered.utils.file_upload import UploadCategory, upload_image
from venered.utils.rate_limit import DEFAULT_LIMIT, limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/{category}")
@limiter.limit(DEFAULT_LIMIT)
async def upload(
    request: Request,
    category: UploadCategory,
    file: UploadFile = File(...),
    auth: AuthContext = Depends(get_auth_context)
):
    """Upload an image for a post, a message or a profile"""
    try:
        # One byte past the limit is enough to know the file is too large
        content = await file.read(settings.MAX_UPLOAD_SIZE + 1)
        url = await upload_image(content, file.filename, file.content_type, category=category)
    except Exception as e:
        logger.error(f"Upload by {auth.user_id} failed: {e}")
        raise to_http(e, "Image upload failed")

    return {"url": url}
