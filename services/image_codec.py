"""Base64 encoding of user-selected images for the remote editor."""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

UNKNOWN_MEDIA_TYPE = "application/octet-stream"

FORMAT_TO_MEDIA_TYPE = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}


class ReadError(RuntimeError):
    pass


@dataclass(frozen=True)
class EncodedImage:
    payload: str
    media_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.payload}"

    def decode(self) -> bytes:
        return decode(self.payload)


class SourceImage:
    """A readable image blob chosen by the user, plus its declared media type."""

    def __init__(
        self,
        reader: Callable[[], Awaitable[bytes]],
        media_type: str = "",
        filename: str = "",
    ) -> None:
        self._reader = reader
        self.media_type = (media_type or "").strip().lower()
        self.filename = filename

    @classmethod
    def from_bytes(cls, data: bytes, media_type: str = "", filename: str = "") -> "SourceImage":
        payload = bytes(data)

        async def _read() -> bytes:
            return payload

        return cls(_read, media_type=media_type, filename=filename)

    async def read(self) -> bytes:
        return await self._reader()

    def __repr__(self) -> str:
        return f"SourceImage(filename={self.filename!r}, media_type={self.media_type!r})"


def detect_media_type(image_bytes: bytes) -> str:
    if not image_bytes:
        return UNKNOWN_MEDIA_TYPE
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            fmt = (img.format or "").upper()
    except (UnidentifiedImageError, OSError):
        return UNKNOWN_MEDIA_TYPE
    return FORMAT_TO_MEDIA_TYPE.get(fmt, UNKNOWN_MEDIA_TYPE)


async def encode(blob: SourceImage) -> EncodedImage:
    try:
        image_bytes = await blob.read()
    except ReadError:
        raise
    except (OSError, ValueError) as exc:
        # Closed uploads raise ValueError; vanished files raise OSError.
        logger.warning("Image read failed for %r: %s", blob, exc)
        raise ReadError(str(exc) or "Could not read the selected image.") from exc

    media_type = blob.media_type or detect_media_type(image_bytes)
    payload = base64.b64encode(image_bytes).decode("ascii")
    return EncodedImage(payload=payload, media_type=media_type)


def decode(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except ValueError as exc:
        raise ValueError("Invalid base64 image payload.") from exc
