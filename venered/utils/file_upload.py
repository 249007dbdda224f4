"""
Image upload to ImgBB
"""
import secrets
import time
from pathlib import Path
from typing import Literal, Optional
import logging

import httpx

from venered.config import settings
from venered.utils.errors import InvalidImage, UploadFailed, UploadNotConfigured

logger = logging.getLogger(__name__)

UploadCategory = Literal["posts", "messages", "profiles"]


def build_file_name(category: str) -> str:
    """``{category}_{millis}_{random}``, the extension is added by the caller"""
    return f"{category}_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


async def upload_image(
    content: bytes,
    filename: Optional[str],
    content_type: Optional[str],
    category: UploadCategory = "posts",
    client: Optional[httpx.AsyncClient] = None
) -> str:
    """
    Upload an image and return its public URL

    Raises:
        InvalidImage: not an image, empty or too large
        UploadNotConfigured: no IMGBB_API_KEY
        UploadFailed: the image host refused the upload
    """
    if not content_type or not content_type.startswith("image/"):
        raise InvalidImage("Only image files are allowed")

    if not content:
        raise InvalidImage("The image is empty")

    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise InvalidImage("The image is too large")

    if not settings.IMGBB_API_KEY:
        raise UploadNotConfigured("Image uploads are not configured")

    extension = Path(filename).suffix.lstrip(".") if filename else ""
    name = build_file_name(category)

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=30.0)
    try:
        response = await client.post(
            settings.IMGBB_UPLOAD_URL,
            params={"key": settings.IMGBB_API_KEY},
            data={"name": name},
            files={"image": (f"{name}.{extension or 'jpg'}", content, content_type)}
        )
    except httpx.HTTPError as e:
        logger.error(f"Error uploading image: {e}")
        raise UploadFailed("Could not reach the image host") from e
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code >= 400:
        logger.error(f"Image host returned {response.status_code}")
        raise UploadFailed("The image host rejected the upload")

    try:
        payload = response.json()
    except ValueError as e:
        logger.error(f"Image host sent an unreadable reply: {e}")
        raise UploadFailed("The image host sent an unreadable reply") from e

    if not payload.get("success"):
        message = (payload.get("error") or {}).get("message")
        raise UploadFailed(message or "The image host rejected the upload")

    data = payload.get("data") or {}
    public_url = data.get("url") or data.get("display_url")
    if not public_url:
        raise UploadFailed("The image host returned no public URL")

    logger.info(f"Uploaded {category} image {name}")
    return public_url
