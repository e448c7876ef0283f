from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from factories import make_image

from app_factory import create_app
from config import TestingConfig
from services.ai.gemini import GeminiImageEditor

MODEL_NAME = "gemini-2.5-flash-image"


@pytest.fixture
def red_png() -> bytes:
    return make_image(10, 10, fmt="PNG", color="red")


@pytest.fixture
def genai_client() -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


@pytest.fixture
def editor(genai_client: MagicMock) -> GeminiImageEditor:
    return GeminiImageEditor(api_key="", model_name=MODEL_NAME, client=genai_client)


@pytest.fixture
async def client(editor: GeminiImageEditor) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(TestingConfig, editor=editor)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
