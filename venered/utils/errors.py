"""
Error types and the mapping of backend failures to user-facing toasts.
Routes catch at the call site and raise what ``to_http`` returns.
"""
from typing import Any, Dict

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

# PostgREST code for ".single()" matching no rows
NO_ROWS_CODE = "PGRST116"

class VeneredError(ValueError):
    """A domain rule stopped the action; the message is shown to the user"""
    title = "Error"

class MessagingNotAllowed(VeneredError):
    title = "Could not send"

class AlreadyFollowing(VeneredError):
    pass

class InvalidImage(VeneredError):
    title = "Image upload failed"

class UploadNotConfigured(VeneredError):
    title = "Image upload failed"

class UploadFailed(Exception):
    """The image host rejected or failed the upload"""

def toast(title: str, description: str) -> Dict[str, Any]:
    return {"title": title, "description": description, "variant": "destructive"}

def to_http(exc: Exception, fallback: str = "Something went wrong") -> HTTPException:
    """Map a failed action to an HTTPException carrying a destructive toast"""
    if isinstance(exc, HTTPException):
        return exc

    if isinstance(exc, VeneredError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=toast(exc.title, str(exc))
        )

    if isinstance(exc, APIError):
        if exc.code == NO_ROWS_CODE:
            return HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=toast("Not found", exc.message or fallback)
            )
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=toast("Error", exc.message or fallback)
        )

    if isinstance(exc, UploadFailed):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=toast("Image upload failed", str(exc) or fallback)
        )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=toast("Error", fallback)
    )
