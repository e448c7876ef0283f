import base64
from io import BytesIO

from google.genai import types as genai_types
from PIL import Image


def make_image(width: int = 10, height: int = 10, fmt: str = "PNG", color: str = "red") -> bytes:
    img = Image.new("RGB", (width, height), color=color)
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def image_part(data: bytes, mime_type: str = "image/png") -> genai_types.Part:
    return genai_types.Part(inline_data=genai_types.Blob(mime_type=mime_type, data=data))


def text_part(text: str) -> genai_types.Part:
    return genai_types.Part(text=text)


def make_response(*parts: genai_types.Part) -> genai_types.GenerateContentResponse:
    return genai_types.GenerateContentResponse(
        candidates=[
            genai_types.Candidate(content=genai_types.Content(role="model", parts=list(parts)))
        ]
    )
