"""HTTP routes: the editor page and the JSON session API."""

from __future__ import annotations

from fastapi import FastAPI

from .api import api_router, session_payload
from .web import web_router


def register_routes(app: FastAPI) -> None:
    app.include_router(web_router)
    app.include_router(api_router)


__all__ = ["api_router", "register_routes", "session_payload", "web_router"]
