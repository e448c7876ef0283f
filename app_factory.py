"""Application factory that wires configuration, services, middleware, and routes."""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

if os.getenv("LOAD_DOTENV", "1").lower() == "1":
    load_dotenv(os.getenv("DOTENV_FILE") or None)

from config import BaseConfig, get_config_class
from logging_config import configure_logging
from paths import TEMPLATE_DIR
from routes import register_routes
from services import AppServices
from services.ai import ImageEditor, build_image_editor
from services.session_store import EditSessionRegistry

logger = logging.getLogger(__name__)

TOO_LARGE_BODY = b'{"error":"Request body too large."}'


class MaxBodySizeExceeded(Exception):
    pass


class MaxBodySizeMiddleware:
    """Rejects request bodies over the limit with 413 before routing sees them."""

    def __init__(self, app, max_body_size: int) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http" or self.max_body_size <= 0:
            await self.app(scope, receive, send)
            return

        if _declared_length(scope) > self.max_body_size:
            await _send_too_large(send)
            return

        received = 0
        started = False

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    raise MaxBodySizeExceeded()
            return message

        async def tracking_send(message):
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except MaxBodySizeExceeded:
            if not started:
                await _send_too_large(send)


def _declared_length(scope) -> int:
    for key, value in scope.get("headers", []):
        if key.lower() == b"content-length":
            try:
                return int(value)
            except (TypeError, ValueError):
                return 0
    return 0


async def _send_too_large(send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 413,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(TOO_LARGE_BODY)).encode("ascii")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": TOO_LARGE_BODY})


def create_app(
    config_class: type[BaseConfig] | None = None,
    editor: Optional[ImageEditor] = None,
) -> FastAPI:
    app = FastAPI(title="AI Photo Editor")
    app_config = config_class or get_config_class()

    configure_logging(getattr(app_config, "LOG_LEVEL", "INFO"))
    max_body_size = int(getattr(app_config, "MAX_CONTENT_LENGTH", 0) or 0)
    if max_body_size > 0:
        app.add_middleware(MaxBodySizeMiddleware, max_body_size=max_body_size)

    config_values = {key: getattr(app_config, key) for key in dir(app_config) if key.isupper()}
    if editor is None:
        editor = build_image_editor(config_values)
    if not editor.available:
        logger.warning("Image editor unavailable; edits will fail until GEMINI_API_KEY is set.")

    app.state.services = AppServices(
        editor=editor,
        sessions=EditSessionRegistry(
            editor, idle_minutes=int(getattr(app_config, "SESSION_IDLE_MINUTES", 0) or 0)
        ),
        example_prompts=tuple(getattr(app_config, "EXAMPLE_PROMPTS", ())),
    )
    app.state.config = app_config
    app.state.templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    app.add_middleware(
        SessionMiddleware,
        secret_key=getattr(app_config, "SECRET_KEY", "dev-secret-2025"),
        same_site=getattr(app_config, "SESSION_COOKIE_SAMESITE", "lax"),
        https_only=getattr(app_config, "SESSION_COOKIE_SECURE", False),
    )

    register_routes(app)

    if (
        getattr(app_config, "ENV", "development") == "production"
        and getattr(app_config, "SECRET_KEY", "dev-secret-2025") == "dev-secret-2025"
    ):
        logger.warning("Using default SECRET_KEY in production.")

    return app
