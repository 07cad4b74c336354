"""Tests for configuration and error messages."""

from mvdirector.config import Config, PipelineConfig
from mvdirector.errors import (
    ERROR_MESSAGES,
    MalformedResponseError,
    MissingCredentialError,
    UnmatchedArtifactError,
    user_message,
)
from mvdirector.services.credentials import EnvCredentialProvider


class TestConfig:
    def test_valid(self, test_config):
        assert test_config.validate() == []

    def test_invalid_values(self, test_config):
        test_config.text_backend = "gpt"
        test_config.pipeline.primary_locale = "fr"
        test_config.pipeline.max_shot_duration = 0

        errors = test_config.validate()

        assert len(errors) == 3

    def test_gemini_key_preferred(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        monkeypatch.setenv("GOOGLE_API_KEY", "google")

        assert Config().google_api_key == "gemini"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_SHOT_DURATION", "3.5")
        monkeypatch.setenv("STORY_BATCH_SIZE", "2")

        pipeline = PipelineConfig()

        assert pipeline.max_shot_duration == 3.5
        assert pipeline.story_batch_size == 2

    def test_claude_max_tokens(self, test_config):
        test_config.claude_model = "claude-haiku-4-5-20251001"
        assert test_config.claude_max_tokens == 8192


class TestEnvCredentialProvider:
    def test_follows_backend(self, test_config):
        test_config.anthropic_api_key = ""
        provider = EnvCredentialProvider(test_config)
        assert provider.has_credential() is True

        test_config.text_backend = "claude"
        assert provider.has_credential() is False

    def test_select_credential(self, test_config):
        test_config.google_api_key = ""
        provider = EnvCredentialProvider(test_config, backend="gemini")

        provider.select_credential("  new-key ")

        assert test_config.google_api_key == "new-key"
        assert provider.has_credential() is True


class TestUserMessage:
    def test_every_kind_has_both_locales(self):
        for messages in ERROR_MESSAGES.values():
            assert set(messages) == {"ko", "en"}

    def test_locale_and_details(self):
        error = MalformedResponseError("bad", ["shot 2: 7s exceeds 5s"])

        message = user_message(error, "en")

        assert message.startswith("The AI response was not in the expected format")
        assert message.endswith("(shot 2: 7s exceeds 5s)")

    def test_korean(self):
        assert user_message(MissingCredentialError(), "ko").startswith("API 키")

    def test_unmatched_carries_key(self):
        error = UnmatchedArtifactError(42)
        assert error.key == 42
        assert error.kind == "unmatched_artifact"
