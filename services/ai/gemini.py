"""Gemini-based image editor: one request in, the first image part out."""

from __future__ import annotations

import base64
import logging
from typing import Any, Iterable, Optional

from google import genai
from google.genai import types as genai_types

from ..image_codec import EncodedImage, decode
from ..timing import log_timing
from .base import NoImageInResponse, TransportError

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]
NOT_CONFIGURED_MESSAGE = "Image editing is not configured; set GEMINI_API_KEY."
NO_IMAGE_MESSAGE = "The model did not return an image for this instruction."
MALFORMED_RESPONSE_MESSAGE = "Malformed response from the image model."


class GeminiImageEditor:
    def __init__(
        self,
        api_key: str,
        model_name: str,
        enabled: bool = True,
        timeout_seconds: float = 0.0,
        client: Any = None,
    ) -> None:
        self._model_name = model_name
        self._client = client
        self.available = bool(enabled) and (client is not None or bool(api_key))
        if not self.available:
            logger.info("[Gemini] API key not set; image editing disabled")
            return
        if self._client is not None:
            return

        http_options = None
        if timeout_seconds and timeout_seconds > 0:
            # The SDK expects milliseconds.
            http_options = genai_types.HttpOptions(timeout=int(timeout_seconds * 1000))
        try:
            self._client = genai.Client(api_key=api_key, http_options=http_options)
            logger.info("[Gemini] configured model %s", model_name)
        except Exception as exc:
            logger.warning("[Gemini] config error: %s", exc)
            self.available = False

    async def request_edit(self, image: EncodedImage, instruction: str) -> EncodedImage:
        instruction = (instruction or "").strip()
        if not instruction:
            raise ValueError("instruction must not be empty")
        if not self.available or self._client is None:
            raise TransportError(NOT_CONFIGURED_MESSAGE)

        contents = [
            genai_types.Part.from_bytes(data=decode(image.payload), mime_type=image.media_type),
            genai_types.Part.from_text(text=instruction),
        ]
        config = genai_types.GenerateContentConfig(response_modalities=RESPONSE_MODALITIES)
        try:
            with log_timing(f"gemini generate_content {self._model_name}", logger):
                response = await self._client.aio.models.generate_content(
                    model=self._model_name, contents=contents, config=config
                )
        except Exception as exc:
            logger.warning("[Gemini] request failed: %s", exc)
            raise TransportError(str(exc)) from exc

        parts = response_parts(response)
        result = first_image_part(parts)
        if result is not None:
            logger.info("[Gemini] image returned (%s)", result.media_type)
            return result

        text = response_text(parts)
        if text:
            logger.info("[Gemini] text-only response: %s", text[:200])
            raise NoImageInResponse(f"{NO_IMAGE_MESSAGE} Model said: {text}")
        raise NoImageInResponse(NO_IMAGE_MESSAGE)


def response_parts(response: object) -> list:
    """Flattens the parts of every candidate, keeping response order."""
    if response is None:
        raise TransportError(MALFORMED_RESPONSE_MESSAGE)
    if isinstance(response, dict):
        if "candidates" not in response:
            raise TransportError(MALFORMED_RESPONSE_MESSAGE)
        candidates = response.get("candidates")
    elif hasattr(response, "candidates"):
        candidates = response.candidates
    else:
        raise TransportError(MALFORMED_RESPONSE_MESSAGE)

    if candidates is None:
        candidates = []
    elif not isinstance(candidates, (list, tuple)):
        raise TransportError(MALFORMED_RESPONSE_MESSAGE)

    parts: list = []
    for candidate in candidates:
        content = _field(candidate, "content")
        candidate_parts = _field(content, "parts") or []
        if not isinstance(candidate_parts, (list, tuple)):
            raise TransportError(MALFORMED_RESPONSE_MESSAGE)
        parts.extend(candidate_parts)
    return parts


def first_image_part(parts: Iterable[object]) -> Optional[EncodedImage]:
    """Returns the first image-typed part; later image parts are ignored."""
    for part in parts:
        image = _part_image(part)
        if image is not None:
            return image
    return None


def response_text(parts: Iterable[object]) -> str:
    texts = []
    for part in parts:
        text = _field(part, "text")
        if isinstance(text, str) and text.strip():
            texts.append(text.strip())
    return " ".join(texts)


def _part_image(part: object) -> Optional[EncodedImage]:
    inline = _field(part, "inline_data", "inlineData")
    if not inline:
        return None

    mime_type = _field(inline, "mime_type", "mimeType")
    data = _field(inline, "data")
    if not mime_type or not str(mime_type).startswith("image/"):
        return None
    if not data:
        return None

    if isinstance(data, str):
        payload = data
    elif isinstance(data, (bytes, bytearray)):
        # The SDK hands back decoded bytes; their base64 text is the wire payload.
        payload = base64.b64encode(bytes(data)).decode("ascii")
    else:
        return None
    return EncodedImage(payload=payload, media_type=str(mime_type))


def _field(obj: object, *names: str) -> Any:
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None
