"""Generation gateway: the single boundary between stages and the AI backends.

``generate`` dispatches on the stage kind to the matching agent, which builds
the prompt, declares the output schema and parses the payload into artifact
types. The gateway never reads or writes project state; no retries happen here.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional, Union

from mvdirector.agents.character_agent import CharacterAgent
from mvdirector.agents.prompt_agent import PromptAgent
from mvdirector.agents.story_agent import StoryAgent
from mvdirector.agents.storyboard_agent import StoryboardAgent
from mvdirector.config import Config, config as default_config
from mvdirector.models.schemas import GeneratedImage
from mvdirector.services.image_generator import ImageGenerator
from mvdirector.services.text_generator import (
    ImageAttachment,
    TextGenerator,
    create_text_generator,
)

logger = logging.getLogger(__name__)


class StageKind(str, Enum):
    """Kinds of structured generation requests."""

    STORIES = "stories"
    CUSTOM_STORY = "custom_story"
    CHARACTERS = "characters"
    CHARACTER_EDIT = "character_edit"
    STORYBOARD = "storyboard"
    DETAILED_STORYBOARD = "detailed_storyboard"
    IMAGE_PROMPTS = "image_prompts"
    VIDEO_PROMPTS = "video_prompts"


class GenerationGateway:
    """Turns stage context into generation requests and parsed artifacts."""

    def __init__(
        self,
        config: Optional[Config] = None,
        text_generator: Optional[TextGenerator] = None,
        image_generator: Optional[ImageGenerator] = None,
    ):
        self.config = config or default_config
        self.text_generator = text_generator or create_text_generator(self.config)
        self.image_generator = image_generator or ImageGenerator(self.config)

        self.stories = StoryAgent(self.config, self.text_generator)
        self.characters = CharacterAgent(self.config, self.text_generator)
        self.storyboard = StoryboardAgent(self.config, self.text_generator)
        self.prompts = PromptAgent(self.config, self.text_generator)

        self._handlers: dict[StageKind, Callable[..., Any]] = {
            StageKind.STORIES: self.stories.generate_stories,
            StageKind.CUSTOM_STORY: self.stories.expand_custom_story,
            StageKind.CHARACTERS: self.characters.generate_characters,
            StageKind.CHARACTER_EDIT: self.characters.regenerate_character,
            StageKind.STORYBOARD: self.storyboard.generate_storyboard,
            StageKind.DETAILED_STORYBOARD: self.storyboard.generate_detailed_storyboard,
            StageKind.IMAGE_PROMPTS: self.prompts.generate_image_prompts,
            StageKind.VIDEO_PROMPTS: self.prompts.generate_video_prompts,
        }

    def generate(self, stage_kind: Union[StageKind, str], **context: Any) -> Any:
        """
        Run one structured generation.

        Args:
            stage_kind: Which stage output to produce (member or its value)
            **context: Keyword arguments of the matching agent method

        Returns:
            Parsed artifacts (list of records, a single record, or prompt pairs)

        Raises:
            GenerationError: missing credential, empty/malformed payload,
                or a failed backend call
        """
        kind = StageKind(stage_kind)
        handler = self._handlers[kind]
        logger.info(f"Gateway request: {kind.value}")
        return handler(**context)

    def render_images(
        self,
        prompt: str,
        aspect_ratio: str,
        count: int,
        model: Optional[str] = None,
        reference_images: Optional[list[ImageAttachment]] = None,
    ) -> list[GeneratedImage]:
        """Render stills for a shot through the image capability."""
        logger.info(f"Gateway request: render {count} image(s) at {aspect_ratio}")
        return self.image_generator.generate_images(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            count=count,
            model=model,
            reference_images=reference_images,
        )
