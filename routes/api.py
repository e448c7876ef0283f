"""JSON API endpoints for the edit session: select, submit, inspect."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from routes.utils import UploadError, get_edit_session, get_services, read_upload
from services.edit_session import EditSession, Failure, Idle, Loading, Success

api_router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def session_payload(request: Request, session: EditSession) -> dict:
    phase = session.phase
    result = session.result
    payload: dict[str, object] = {
        "phase": phase.name,
        "error": session.error,
        "failure_kind": phase.kind if isinstance(phase, Failure) else None,
        "can_submit": session.can_submit,
        "has_image": session.source_image is not None,
        "original_url": (
            str(request.url_for("api_session_original")) if session.source_image else None
        ),
        "result": None,
    }
    if result is not None:
        payload["result"] = {
            "media_type": result.media_type,
            "data_url": result.data_url,
            "url": str(request.url_for("api_session_result")),
        }
    return payload


def _submit_status(session: EditSession) -> int:
    phase = session.phase
    if isinstance(phase, Success):
        return 200
    if isinstance(phase, Idle):
        return 400
    if isinstance(phase, Loading):
        return 409
    return 502


@api_router.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@api_router.get("/examples")
def example_prompts(request: Request) -> dict:
    return {"prompts": list(get_services(request).example_prompts)}


@api_router.get("/session", name="api_session")
def session_state(request: Request):
    return session_payload(request, get_edit_session(request))


@api_router.post("/session/image", name="api_select_image")
async def select_image(request: Request, image: Optional[UploadFile] = File(default=None)):
    session = get_edit_session(request)
    try:
        source = await read_upload(image)
    except UploadError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    session.select_image(source)
    logger.info("Image selected: %r", source)
    return session_payload(request, session)


@api_router.post("/session/edits", name="api_submit_edit")
async def submit_edit(request: Request, instruction: str = Form(default="")):
    session = get_edit_session(request)
    if session.is_loading:
        return JSONResponse(
            {**session_payload(request, session), "error": "An edit is already in progress."},
            status_code=409,
        )
    await session.submit(instruction)
    return JSONResponse(session_payload(request, session), status_code=_submit_status(session))


@api_router.get("/session/original", name="api_session_original")
async def original_image(request: Request):
    source = get_edit_session(request).source_image
    if source is None:
        return JSONResponse({"error": "No image selected."}, status_code=404)
    try:
        image_bytes = await source.read()
    except (OSError, ValueError) as exc:
        logger.warning("Original image unreadable: %s", exc)
        return JSONResponse({"error": "Original image unavailable."}, status_code=404)
    media_type = source.media_type or "application/octet-stream"
    return Response(content=image_bytes, media_type=media_type)


@api_router.get("/session/result", name="api_session_result")
def result_image(request: Request):
    result = get_edit_session(request).result
    if result is None:
        return JSONResponse({"error": "No edited image yet."}, status_code=404)
    try:
        image_bytes = result.decode()
    except ValueError:
        logger.warning("Edited image payload is not valid base64")
        return JSONResponse({"error": "Edited image unavailable."}, status_code=500)
    headers = {"Content-Disposition": 'inline; filename="edited-image"'}
    return Response(content=image_bytes, media_type=result.media_type, headers=headers)
