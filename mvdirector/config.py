"""Configuration management for MV Director."""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables (override=True to ensure .env takes precedence)
load_dotenv(override=True)


def _get_google_api_key() -> str:
    """GEMINI_API_KEY wins over GOOGLE_API_KEY when both are set."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")


@dataclass
class ImageConfig:
    """Shot image rendering configuration."""

    # Gemini models (support reference images):
    # - gemini-2.5-flash-image: Fast, 1024px (Nano Banana) - recommended default
    # - gemini-3-pro-image-preview: Professional, up to 4K (Nano Banana Pro)
    # Imagen models (text-to-image only, reference images are ignored):
    # - imagen-4.0-generate-001
    # - imagen-4.0-fast-generate-001
    model: str = field(
        default_factory=lambda: os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
    )
    aspect_ratio: str = field(
        default_factory=lambda: os.getenv("IMAGE_ASPECT_RATIO", "16:9")
    )
    max_images_per_request: int = 20
    max_workers: int = field(
        default_factory=lambda: int(os.getenv("IMAGE_MAX_WORKERS", "4"))
    )

    @property
    def available_models(self) -> list[str]:
        return [
            "gemini-2.5-flash-image",
            "gemini-3-pro-image-preview",
            "imagen-4.0-generate-001",
            "imagen-4.0-fast-generate-001",
        ]


@dataclass
class PipelineConfig:
    """Stage pipeline configuration."""

    # Locale used for the canonical fields of the very first story batch
    primary_locale: str = field(
        default_factory=lambda: os.getenv("PRIMARY_LOCALE", "ko")
    )
    ui_locale: str = field(default_factory=lambda: os.getenv("UI_LOCALE", "ko"))
    story_batch_size: int = field(
        default_factory=lambda: int(os.getenv("STORY_BATCH_SIZE", "4"))
    )
    max_shot_duration: float = field(
        default_factory=lambda: float(os.getenv("MAX_SHOT_DURATION", "5"))
    )
    min_characters: int = 1
    max_characters: int = 3
    min_base_scenes: int = 8
    max_base_scenes: int = 12
    min_lyrics_chars: int = 10
    # How much of the lyrics the character prompt sees
    lyrics_context_chars: int = 200


@dataclass
class Config:
    """Main application configuration."""

    # API Keys
    google_api_key: str = field(default_factory=_get_google_api_key)
    anthropic_api_key: str = field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", "")
    )

    # Structured text backend: "gemini" (default) or "claude"
    text_backend: str = field(
        default_factory=lambda: os.getenv("TEXT_BACKEND", "gemini").lower()
    )

    gemini_text_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
    )

    # Claude model selection:
    # - claude-sonnet-4-5-20250929 (default, balanced)
    # - claude-haiku-4-5-20251001 (fastest, cheapest)
    # - claude-opus-4-5-20251101 (highest quality, most expensive)
    claude_model: str = field(
        default_factory=lambda: os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5-20250929")
    )

    @property
    def claude_max_tokens(self) -> int:
        """Get max output tokens for the current Claude model.

        Detailed storyboards run to 30 shots with two locales each, so the
        larger budgets matter here.
        """
        model = self.claude_model.lower()
        if "haiku" in model:
            return 8192
        elif "opus" in model:
            return 32768
        else:  # Sonnet or unknown
            return 16384

    # Sub-configurations
    image: ImageConfig = field(default_factory=ImageConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)

    # Paths
    project_root: Path = field(
        default_factory=lambda: Path(__file__).parent.parent
    )

    @property
    def output_dir(self) -> Path:
        return self.project_root / os.getenv("OUTPUT_DIR", "output")

    @property
    def exports_dir(self) -> Path:
        return self.output_dir / "exports"

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if self.text_backend not in ("gemini", "claude"):
            errors.append(f"TEXT_BACKEND must be 'gemini' or 'claude', got '{self.text_backend}'")
        for name, value in (
            ("PRIMARY_LOCALE", self.pipeline.primary_locale),
            ("UI_LOCALE", self.pipeline.ui_locale),
        ):
            if value not in ("ko", "en"):
                errors.append(f"{name} must be 'ko' or 'en', got '{value}'")
        if self.pipeline.max_shot_duration <= 0:
            errors.append("MAX_SHOT_DURATION must be positive")
        if self.pipeline.story_batch_size < 1:
            errors.append("STORY_BATCH_SIZE must be at least 1")
        return errors

    def ensure_directories(self) -> None:
        """Create output directories if they don't exist."""
        for path in [self.output_dir, self.exports_dir]:
            path.mkdir(parents=True, exist_ok=True)


# Global config instance
config = Config()
