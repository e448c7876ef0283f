"""Shared helpers for session handling and route utilities."""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from fastapi import UploadFile
from starlette.requests import Request

from services import AppServices
from services.edit_session import EditSession
from services.image_codec import SourceImage

SESSION_ID_KEY = "session_id"
FLASH_KEY = "flash_messages"

MISSING_UPLOAD_MESSAGE = "Please choose an image file."
UNSUPPORTED_UPLOAD_MESSAGE = "Unsupported file type. Please choose an image."


class UploadError(ValueError):
    pass


def get_session_id(request: Request) -> str:
    # Create a stable session id so each browser gets its own edit session.
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        session_id = uuid4().hex
        request.session[SESSION_ID_KEY] = session_id
    return session_id


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_edit_session(request: Request) -> EditSession:
    return get_services(request).sessions.get(get_session_id(request))


def add_flash(request: Request, message: str) -> None:
    messages = list(request.session.get(FLASH_KEY, []))
    messages.append(message)
    request.session[FLASH_KEY] = messages


def pop_flashes(request: Request) -> list[str]:
    messages = request.session.pop(FLASH_KEY, [])
    return list(messages)


async def read_upload(upload: Optional[UploadFile]) -> SourceImage:
    """Turns a multipart upload into a SourceImage, rejecting non-images."""
    if upload is None or not upload.filename:
        raise UploadError(MISSING_UPLOAD_MESSAGE)
    content_type = (upload.content_type or "").lower()
    if content_type == "application/octet-stream":
        # Undeclared; the codec sniffs the bytes instead.
        content_type = ""
    if content_type and not content_type.startswith("image/"):
        raise UploadError(UNSUPPORTED_UPLOAD_MESSAGE)
    payload = await upload.read()
    if not payload:
        raise UploadError(MISSING_UPLOAD_MESSAGE)
    return SourceImage.from_bytes(payload, media_type=content_type, filename=upload.filename)
