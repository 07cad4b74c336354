"""Stage controllers for the MV Director pipeline."""

import logging
import threading
from collections import Counter
from typing import Optional

from mvdirector.agents.gateway import StageKind
from mvdirector.errors import (
    EmptyPromptError,
    GenerationError,
    MissingCredentialError,
    UnmatchedArtifactError,
    user_message,
)
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import (
    AspectRatio,
    Character,
    Scene,
    StoryOption,
    WorkflowStep,
)
from mvdirector.pipeline.base import StageController
from mvdirector.pipeline.splitter import DurationSplitter
from mvdirector.services.credentials import CredentialProvider
from mvdirector.services.text_generator import ImageAttachment

logger = logging.getLogger(__name__)


class StoryStage(StageController):
    """Story concepts: append-only regeneration plus custom entries."""

    step = WorkflowStep.STORIES

    @property
    def current_artifacts(self) -> list[StoryOption]:
        return self.state.stories

    def inputs_ready(self) -> bool:
        return bool(self.state.lyrics.strip())

    @property
    def can_advance(self) -> bool:
        return self.selected_story is not None

    @property
    def selected_story(self) -> Optional[StoryOption]:
        return self.state.selected_story

    def _generate(self) -> None:
        first_batch = not self.state.stories
        # The very first batch is keyed to the primary locale
        default_locale = (
            Locale(self.config.pipeline.primary_locale) if first_batch else self.locale
        )
        batch = self.gateway.generate(
            StageKind.STORIES,
            lyrics=self.state.lyrics,
            default_locale=default_locale,
            count=self.config.pipeline.story_batch_size,
        )
        self.state.stories = self.state.stories + list(batch)
        if first_batch:
            self.state.selected_story_index = -1
        logger.info(f"Stories: +{len(batch)} (total {len(self.state.stories)})")

    def select(self, index: int) -> None:
        """Select a story; -1 clears the choice."""
        if index != -1:
            self._check_index(index, self.state.stories)
        self.state.selected_story_index = index

    def _append_and_select(self, story: StoryOption) -> int:
        self.state.stories = self.state.stories + [story]
        index = len(self.state.stories) - 1
        self.state.selected_story_index = index
        return index

    def add_custom_story(
        self,
        title: str,
        synopsis: str,
        genre: str = "",
        mood: str = "",
    ) -> int:
        """Append a hand-written story and select it.

        Both locales carry the same text.

        Returns:
            Index of the new story
        """
        title, synopsis = title.strip(), synopsis.strip()
        if not title or not synopsis:
            raise ValueError("A custom story needs a title and a synopsis")

        values = {
            "title": title,
            "genre": genre.strip() or "Custom",
            "synopsis": synopsis,
            "mood": mood.strip() or "Custom",
        }
        story = StoryOption(
            localized={locale: dict(values) for locale in Locale},
            **values,
        )
        return self._append_and_select(story)

    def expand_custom_story(self, keywords: str) -> bool:
        """Let the AI expand keywords into a full story; append and select it."""
        if not keywords.strip():
            raise ValueError("Keywords must not be empty")

        def expand() -> None:
            story = self.gateway.generate(
                StageKind.CUSTOM_STORY,
                keywords=keywords.strip(),
                lyrics=self.state.lyrics,
                default_locale=self.locale,
            )
            self._append_and_select(story)

        return self._run(expand)


class CharacterStage(StageController):
    """Cast roster: full regeneration, targeted AI edits and manual edits."""

    step = WorkflowStep.CHARACTERS

    @property
    def current_artifacts(self) -> list[Character]:
        return self.state.characters

    def inputs_ready(self) -> bool:
        return self.state.selected_story is not None

    def _generate(self) -> None:
        self.state.characters = list(self.gateway.generate(
            StageKind.CHARACTERS,
            story=self.state.selected_story,
            lyrics=self.state.lyrics,
            locale=self.locale,
            default_locale=self.locale,
        ))

    def regenerate_character(
        self,
        index: int,
        instruction: str = "",
        reference_image: Optional[ImageAttachment] = None,
    ) -> bool:
        """Regenerate one character; only that roster slot is replaced."""
        self._check_index(index, self.state.characters)
        target = self.state.characters[index]

        def rewrite() -> None:
            replacement = self.gateway.generate(
                StageKind.CHARACTER_EDIT,
                character=target,
                instruction=instruction.strip(),
                locale=self.locale,
                default_locale=self.locale,
                story=self.state.selected_story,
                reference_image=reference_image,
            )
            # The roster may have been replaced while the call was in flight
            roster = self.state.characters
            if index < len(roster) and roster[index] is target:
                roster[index] = replacement
            else:
                logger.warning(f"Character {index} changed during regeneration; result dropped")

        return self._run(rewrite)

    def add_character(self, character: Optional[Character] = None) -> int:
        """Append a character (blank by default) and return its index."""
        if character is None:
            name = "새 인물" if self.locale is Locale.KO else "New Character"
            character = Character(name=name)
        self.state.characters.append(character)
        return len(self.state.characters) - 1

    def delete_character(self, index: int) -> Character:
        self._check_index(index, self.state.characters)
        return self.state.characters.pop(index)

    def edit_character(self, index: int, **fields) -> Character:
        """Apply manual edits; localized fields go through ``apply_manual_edit``."""
        self._check_index(index, self.state.characters)
        character = self.state.characters[index]
        for name, value in fields.items():
            if name == "keywords":
                if isinstance(value, str):
                    value = value.split(",")
                character.keywords = [str(k).strip() for k in value if str(k).strip()]
            else:
                character.apply_manual_edit(name, value)
        return character


class StoryboardStage(StageController):
    """Coarse storyboard, always replaced wholesale."""

    step = WorkflowStep.STORYBOARD

    @property
    def current_artifacts(self) -> list[Scene]:
        return self.state.base_scenes

    def inputs_ready(self) -> bool:
        return bool(self.state.lyrics.strip()) and self.state.selected_story is not None

    def _generate(self) -> None:
        self.state.base_scenes = list(self.gateway.generate(
            StageKind.STORYBOARD,
            lyrics=self.state.lyrics,
            story=self.state.selected_story,
            characters=self.state.characters,
            locale=self.locale,
            default_locale=self.locale,
        ))


class DetailedStoryboardStage(StageController):
    """Shot list derived from the base storyboard under the duration bound."""

    step = WorkflowStep.DETAILED_STORYBOARD

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.splitter = DurationSplitter(self.config.pipeline.max_shot_duration)

    @property
    def current_artifacts(self) -> list[Scene]:
        return self.state.detailed_scenes

    def inputs_ready(self) -> bool:
        return bool(self.state.base_scenes) and self.state.selected_story is not None

    def _generate(self) -> None:
        # Never blend with a previous shot list (prompts and images go with it)
        self.state.detailed_scenes = []
        self.state.detailed_scenes = self.splitter.split(
            self.gateway,
            base_scenes=self.state.base_scenes,
            story=self.state.selected_story,
            characters=self.state.characters,
            locale=self.locale,
            default_locale=self.locale,
        )


def apply_prompts(
    scenes: list[Scene],
    assignments: list[tuple[int, str]],
    attribute: str,
) -> int:
    """Write prompts onto scenes matched by ``scene_number``.

    Unmatched items are dropped; scenes without an item keep their value.

    Returns:
        Number of dropped items
    """
    by_number = {scene.scene_number: scene for scene in scenes}
    dropped = 0

    def match(scene_number: int) -> Scene:
        scene = by_number.get(scene_number)
        if scene is None:
            raise UnmatchedArtifactError(scene_number)
        return scene

    for scene_number, prompt in assignments:
        try:
            setattr(match(scene_number), attribute, prompt)
        except UnmatchedArtifactError as e:
            logger.warning(f"Dropping {attribute} for unknown scene: {e}")
            dropped += 1
    return dropped


class _PromptStage(StageController):
    """Shared matching-by-scene-number behaviour of the prompt stages."""

    attribute: str

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.unmatched_count = 0
        self.last_warning: Optional[str] = None

    @property
    def current_artifacts(self) -> list[Scene]:
        return self.state.detailed_scenes

    @property
    def has_output(self) -> bool:
        return any(getattr(scene, self.attribute) for scene in self.state.detailed_scenes)

    def inputs_ready(self) -> bool:
        return bool(self.state.detailed_scenes)

    def _request_prompts(self) -> list[tuple[int, str]]:
        raise NotImplementedError

    def _generate(self) -> None:
        scenes = self.state.detailed_scenes
        assignments = self._request_prompts()
        self.unmatched_count = apply_prompts(scenes, assignments, self.attribute)
        self.last_warning = None
        if self.unmatched_count:
            self.last_warning = user_message(
                UnmatchedArtifactError(None), self.locale.value
            )

    def edit_prompt(self, index: int, text: str) -> None:
        """Manually replace one shot's prompt."""
        self._check_index(index, self.state.detailed_scenes)
        setattr(self.state.detailed_scenes[index], self.attribute, text.strip() or None)


class ImagePromptStage(_PromptStage):
    """Image prompts per shot, plus per-shot image rendering."""

    step = WorkflowStep.IMAGE_PROMPTS
    attribute = "image_prompt"

    def __init__(
        self,
        *args,
        image_credentials: Optional[CredentialProvider] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.image_credentials = image_credentials or self.credentials
        self.render_errors: dict[int, str] = {}
        self._rendering: Counter = Counter()
        self._lock = threading.Lock()

    def inputs_ready(self) -> bool:
        return bool(self.state.detailed_scenes) and self.state.selected_story is not None

    def _request_prompts(self) -> list[tuple[int, str]]:
        return self.gateway.generate(
            StageKind.IMAGE_PROMPTS,
            scenes=self.state.detailed_scenes,
            story=self.state.selected_story,
            locale=self.locale,
        )

    @property
    def rendering(self) -> set[int]:
        """Shot indices with a render in flight."""
        with self._lock:
            return {index for index, n in self._rendering.items() if n > 0}

    def render_images(
        self,
        index: int,
        aspect_ratio: str = "16:9",
        count: int = 1,
        model: Optional[str] = None,
        reference_images: Optional[list[ImageAttachment]] = None,
    ) -> bool:
        """
        Render stills for one shot and append them to its images.

        Renders for different shots may run concurrently; each writes only
        its own shot.

        Raises:
            IndexError: no such shot
            ValueError: aspect ratio or count out of range
        """
        self._check_index(index, self.state.detailed_scenes)
        AspectRatio(aspect_ratio)
        max_count = self.config.image.max_images_per_request
        if not 1 <= count <= max_count:
            raise ValueError(f"count must be between 1 and {max_count}, got {count}")

        self.render_errors.pop(index, None)
        if not self.image_credentials.has_credential():
            error = MissingCredentialError("No Google API key selected")
            self.render_errors[index] = user_message(error, self.locale.value)
            return False

        # Bind to the shot object so a regenerated list is never written into
        shot = self.state.detailed_scenes[index]
        prompt = (shot.image_prompt or shot.text("visual_action", Locale.EN)).strip()
        if not prompt:
            error = EmptyPromptError(f"Shot {shot.scene_number} has no prompt")
            self.render_errors[index] = user_message(error, self.locale.value)
            return False

        with self._lock:
            self._rendering[index] += 1
        try:
            images = self.gateway.render_images(
                prompt=prompt,
                aspect_ratio=aspect_ratio,
                count=count,
                model=model,
                reference_images=reference_images,
            )
        except GenerationError as e:
            logger.warning(f"Rendering shot {shot.scene_number} failed: {e}")
            self.render_errors[index] = user_message(e, self.locale.value)
            return False
        finally:
            with self._lock:
                self._rendering[index] -= 1

        shot.generated_images.extend(images)
        logger.info(
            f"Shot {shot.scene_number}: +{len(images)} images (total {len(shot.generated_images)})"
        )
        return True


class VideoPromptStage(_PromptStage):
    """Video prompts per shot, built on the image prompts."""

    step = WorkflowStep.VIDEO_PROMPTS
    attribute = "video_prompt"

    @property
    def can_advance(self) -> bool:
        # Terminal stage
        return False

    def _request_prompts(self) -> list[tuple[int, str]]:
        return self.gateway.generate(
            StageKind.VIDEO_PROMPTS,
            scenes=self.state.detailed_scenes,
        )
