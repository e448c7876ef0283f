"""Server-rendered UI routes for the photo editor page."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from routes.utils import (
    UploadError,
    add_flash,
    get_edit_session,
    get_services,
    pop_flashes,
    read_upload,
)

web_router = APIRouter()
logger = logging.getLogger(__name__)


def _get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def _back_to_index(request: Request) -> RedirectResponse:
    return RedirectResponse(url=str(request.url_for("web_index")), status_code=303)


@web_router.get("/", name="web_index")
def index(request: Request):
    services = get_services(request)
    session = get_edit_session(request)
    result = session.result
    context = {
        "phase": session.phase.name,
        "is_loading": session.is_loading,
        "can_submit": session.can_submit,
        "error": session.error,
        "original_url": (
            str(request.url_for("api_session_original")) if session.source_image else None
        ),
        "result_url": result.data_url if result else None,
        "prompt_value": session.last_instruction,
        "example_prompts": services.example_prompts,
        "ai_available": services.editor.available,
        "messages": pop_flashes(request),
    }
    return _get_templates(request).TemplateResponse(request, "index.html", context)


@web_router.post("/image", name="web_select_image")
async def select_image(request: Request, image: Optional[UploadFile] = File(default=None)):
    session = get_edit_session(request)
    try:
        source = await read_upload(image)
    except UploadError as exc:
        logger.debug("Rejected upload: %s", exc)
        add_flash(request, str(exc))
        return _back_to_index(request)
    session.select_image(source)
    return _back_to_index(request)


@web_router.post("/edit", name="web_submit_edit")
async def submit_edit(request: Request, prompt: str = Form(default="")):
    session = get_edit_session(request)
    if session.is_loading:
        add_flash(request, "An edit is already in progress.")
        return _back_to_index(request)
    await session.submit(prompt)
    return _back_to_index(request)
