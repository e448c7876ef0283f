"""Service container definitions for core app services."""

from __future__ import annotations

from dataclasses import dataclass

from .ai.base import ImageEditor
from .edit_session import EditSession
from .image_codec import EncodedImage, SourceImage
from .session_store import EditSessionRegistry


@dataclass(frozen=True)
class AppServices:
    editor: ImageEditor
    sessions: EditSessionRegistry
    example_prompts: tuple[str, ...]


__all__ = [
    "AppServices",
    "EditSession",
    "EditSessionRegistry",
    "EncodedImage",
    "SourceImage",
]
