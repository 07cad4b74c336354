"""Shared fixtures: fake backends and canned model payloads."""

import json

import pytest

from mvdirector.agents.gateway import GenerationGateway
from mvdirector.config import Config, ImageConfig, PipelineConfig
from mvdirector.models.schemas import GeneratedImage, ProjectState
from mvdirector.pipeline.session import PipelineSession
from mvdirector.services.credentials import StaticCredentialProvider
from mvdirector.services.text_generator import TextGenerator


class FakeTextGenerator(TextGenerator):
    """Returns queued payloads in order and records every request."""

    def __init__(self, config=None, responses=None):
        super().__init__(config, StaticCredentialProvider("test-key"))
        self.responses = list(responses or [])
        self.requests = []

    def queue(self, *payloads):
        self.responses.extend(payloads)

    def generate_json(self, request):
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("FakeTextGenerator has no queued response")
        payload = self.responses.pop(0)
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, str):
            return payload
        return json.dumps(payload, ensure_ascii=False)


class FakeImageGenerator:
    """Stands in for ImageGenerator; renders ``count`` tiny fake images."""

    def __init__(self):
        self.calls = []
        self.error = None

    def generate_images(self, prompt, aspect_ratio="16:9", count=1, model=None, reference_images=None):
        self.calls.append(
            {"prompt": prompt, "aspect_ratio": aspect_ratio, "count": count, "model": model}
        )
        if self.error is not None:
            raise self.error
        return [GeneratedImage.from_bytes(f"{prompt}-{i}".encode()) for i in range(count)]


def story_item(title, **overrides):
    item = {
        "title_ko": f"{title} (ko)",
        "title_en": title,
        "genre_ko": "드라마",
        "genre_en": "Drama",
        "synopsis_ko": "두 사람이 비 오는 도시에서 다시 만난다.",
        "synopsis_en": "Two people meet again in a rainy city.",
        "mood_ko": "애틋한",
        "mood_en": "Wistful",
    }
    item.update(overrides)
    return item


def character_item(name, **overrides):
    item = {
        "name_ko": f"{name} (ko)",
        "name_en": name,
        "role_ko": "주인공",
        "role_en": "Lead",
        "visualDescription_ko": "긴 검은 머리",
        "visualDescription_en": "Long black hair",
        "personality_ko": "조용한",
        "personality_en": "Quiet",
        "outfit_ko": "빨간 코트",
        "outfit_en": "Red coat",
        "keywords": ["rain", "umbrella"],
    }
    item.update(overrides)
    return item


def scene_item(number, duration="4s", **overrides):
    item = {
        "sceneNumber": number,
        "lyricsSegment": f"line {number}",
        "estimatedDuration": duration,
        "visualAction_ko": f"장면 {number}",
        "visualAction_en": f"Action {number}",
        "moodAndLighting_ko": "푸른 조명",
        "moodAndLighting_en": "Blue light",
        "cameraMovement_ko": "천천히 줌인",
        "cameraMovement_en": "Slow zoom in",
    }
    item.update(overrides)
    return item


LYRICS = "비가 내리는 밤\n우리는 다시 만나\nRain falls tonight, we meet again"


@pytest.fixture
def test_config():
    """Config with fixed values, independent of the environment."""
    return Config(
        google_api_key="test-key",
        anthropic_api_key="",
        text_backend="gemini",
        image=ImageConfig(model="gemini-2.5-flash-image", aspect_ratio="16:9", max_workers=2),
        pipeline=PipelineConfig(
            primary_locale="ko",
            ui_locale="ko",
            story_batch_size=4,
            max_shot_duration=5.0,
        ),
    )


@pytest.fixture
def text_generator(test_config):
    return FakeTextGenerator(test_config)


@pytest.fixture
def image_generator():
    return FakeImageGenerator()


@pytest.fixture
def gateway(test_config, text_generator, image_generator):
    return GenerationGateway(test_config, text_generator, image_generator)


@pytest.fixture
def credentials():
    return StaticCredentialProvider("test-key")


@pytest.fixture
def session(test_config, gateway, credentials):
    return PipelineSession(
        state=ProjectState(lyrics=LYRICS),
        gateway=gateway,
        credentials=credentials,
        image_credentials=StaticCredentialProvider("test-key"),
        config=test_config,
    )
