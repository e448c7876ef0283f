import logging
from unittest.mock import AsyncMock, patch

import pytest
from factories import b64, image_part, make_response

import config
from config import (
    DEFAULT_EXAMPLE_PROMPTS,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config_class,
)
from logging_config import configure_logging
from services.ai import GeminiImageEditor, build_image_editor, gemini
from services.image_codec import EncodedImage
from services.timing import log_timing


class TestGetConfigClass:
    @pytest.mark.parametrize(
        ("env", "expected"),
        [
            ("production", ProductionConfig),
            ("PRODUCTION", ProductionConfig),
            ("testing", TestingConfig),
            ("development", DevelopmentConfig),
            ("anything-else", DevelopmentConfig),
        ],
    )
    def test_selects_by_app_env(
        self, monkeypatch: pytest.MonkeyPatch, env: str, expected: type
    ) -> None:
        monkeypatch.setenv("APP_ENV", env)
        assert get_config_class() is expected

    def test_default_is_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_config_class() is DevelopmentConfig

    def test_production_uses_secure_cookies(self) -> None:
        assert ProductionConfig.SESSION_COOKIE_SECURE is True
        assert DevelopmentConfig.SESSION_COOKIE_SECURE is False


class TestEnvHelpers:
    def test_api_key_prefers_gemini_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        monkeypatch.setenv("API_KEY", "legacy")
        assert config._env_api_key() == "gemini"

    def test_api_key_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "legacy")
        assert config._env_api_key() == "legacy"

    def test_api_key_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        assert config._env_api_key() == ""

    def test_split_prompts(self) -> None:
        assert config._split_prompts("Blur it | Add snow||") == ("Blur it", "Add snow")

    def test_split_prompts_defaults(self) -> None:
        assert config._split_prompts(None) == DEFAULT_EXAMPLE_PROMPTS
        assert config._split_prompts(" | ") == DEFAULT_EXAMPLE_PROMPTS


class TestBuildImageEditor:
    def test_gemini_without_key_is_unavailable(self) -> None:
        editor = build_image_editor({"IMAGE_PROVIDER": "gemini", "GEMINI_API_KEY": ""})
        assert isinstance(editor, GeminiImageEditor)
        assert editor.available is False

    async def test_model_from_config(self) -> None:
        with patch.object(gemini.genai, "Client") as client_cls:
            client = client_cls.return_value
            client.aio.models.generate_content = AsyncMock(
                return_value=make_response(image_part(b"ok", "image/png"))
            )
            editor = build_image_editor({"GEMINI_MODEL": "gemini-custom", "GEMINI_API_KEY": "k"})
            source = EncodedImage(payload=b64(b"src"), media_type="image/png")
            await editor.request_edit(source, "sepia")
        assert client.aio.models.generate_content.call_args.kwargs["model"] == "gemini-custom"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="dall-e"):
            build_image_editor({"IMAGE_PROVIDER": "dall-e"})


class TestLogging:
    def test_noisy_loggers_quieted(self) -> None:
        configure_logging("info")
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.INFO

    def test_debug_keeps_noisy_loggers(self) -> None:
        configure_logging("debug")
        assert logging.getLogger("google_genai").level == logging.DEBUG
        configure_logging("info")


class TestLogTiming:
    def test_logs_elapsed(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("timing-test")
        with caplog.at_level(logging.INFO, logger="timing-test"):
            with log_timing("unit", logger):
                pass
        assert "[Timing] unit:" in caplog.text

    def test_logs_failure_and_reraises(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("timing-test")
        with caplog.at_level(logging.INFO, logger="timing-test"):
            with pytest.raises(RuntimeError):
                with log_timing("unit", logger):
                    raise RuntimeError("boom")
        assert "[Timing] unit failed after" in caplog.text
