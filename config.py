"""Environment-driven configuration values for the photo editor."""

from __future__ import annotations

import os

DEFAULT_EXAMPLE_PROMPTS = (
    "Remove the background",
    "Add a retro filter",
    "Make the colors more vibrant",
    "Convert to black and white",
    "Clean up the product photo",
)


def _env_api_key() -> str:
    # API_KEY is what the browser build of the editor used; keep honoring it.
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")


def _split_prompts(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_EXAMPLE_PROMPTS
    prompts = tuple(item.strip() for item in raw.split("|") if item.strip())
    return prompts or DEFAULT_EXAMPLE_PROMPTS


class BaseConfig:
    SECRET_KEY = os.getenv("APP_SECRET_KEY", "dev-secret-2025")
    ENV = os.getenv("APP_ENV", "development").lower()
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH_MB", "10")) * 1024 * 1024

    IMAGE_PROVIDER = os.getenv("IMAGE_PROVIDER", "gemini").lower()
    GEMINI_API_KEY = _env_api_key()
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image")
    GEMINI_TIMEOUT_SECONDS = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "0"))

    SESSION_IDLE_MINUTES = int(os.getenv("SESSION_IDLE_MINUTES", "120"))
    EXAMPLE_PROMPTS = _split_prompts(os.getenv("EXAMPLE_PROMPTS"))

    SESSION_COOKIE_SAMESITE = "lax"
    SESSION_COOKIE_SECURE = False


class DevelopmentConfig(BaseConfig):
    pass


class ProductionConfig(BaseConfig):
    SESSION_COOKIE_SECURE = True


class TestingConfig(BaseConfig):
    TESTING = True
    GEMINI_API_KEY = ""
    SESSION_IDLE_MINUTES = 0


def get_config_class() -> type[BaseConfig]:
    env = os.getenv("APP_ENV", "development").lower()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
