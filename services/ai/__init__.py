"""Factory for building the configured AI image editor."""

from __future__ import annotations

from .base import (
    EditRequestError,
    ImageEditor,
    NoImageInResponse,
    TransportError,
)
from .gemini import GeminiImageEditor


def build_image_editor(config: dict) -> ImageEditor:
    provider = str(config.get("IMAGE_PROVIDER", "gemini")).lower()
    if provider == "gemini":
        return GeminiImageEditor(
            api_key=config.get("GEMINI_API_KEY", ""),
            model_name=config.get("GEMINI_MODEL", "gemini-2.5-flash-image"),
            timeout_seconds=float(config.get("GEMINI_TIMEOUT_SECONDS", 0) or 0),
        )
    raise ValueError(f"Unsupported IMAGE_PROVIDER: {provider!r}")


__all__ = [
    "EditRequestError",
    "GeminiImageEditor",
    "ImageEditor",
    "NoImageInResponse",
    "TransportError",
    "build_image_editor",
]
