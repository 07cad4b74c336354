"""Pipeline session: project state, stage controllers and step navigation."""

import logging
from typing import Optional

from mvdirector.agents.gateway import GenerationGateway
from mvdirector.config import Config, config as default_config
from mvdirector.errors import GenerationError, StageInputError
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import ProjectState, WorkflowStep
from mvdirector.pipeline.base import StageController
from mvdirector.pipeline.stages import (
    CharacterStage,
    DetailedStoryboardStage,
    ImagePromptStage,
    StoryboardStage,
    StoryStage,
    VideoPromptStage,
)
from mvdirector.services.credentials import CredentialProvider, EnvCredentialProvider

logger = logging.getLogger(__name__)


class PipelineSession:
    """
    One editing session over a single in-memory project.

    Steps are strictly linear. A step can be entered once its predecessor has
    output; revisiting an earlier step never clears later ones.
    """

    def __init__(
        self,
        state: Optional[ProjectState] = None,
        gateway: Optional[GenerationGateway] = None,
        credentials: Optional[CredentialProvider] = None,
        image_credentials: Optional[CredentialProvider] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or default_config
        self.state = state or ProjectState(locale=Locale(self.config.pipeline.ui_locale))
        self.gateway = gateway or GenerationGateway(self.config)
        self.credentials = credentials or EnvCredentialProvider(self.config)
        self.image_credentials = image_credentials or EnvCredentialProvider(
            self.config, backend="gemini"
        )

        shared = dict(
            state=self.state,
            gateway=self.gateway,
            credentials=self.credentials,
            config=self.config,
        )
        self.stories = StoryStage(**shared)
        self.characters = CharacterStage(**shared)
        self.storyboard = StoryboardStage(**shared)
        self.detailed = DetailedStoryboardStage(**shared)
        self.image_prompts = ImagePromptStage(image_credentials=self.image_credentials, **shared)
        self.video_prompts = VideoPromptStage(**shared)

        self._controllers: dict[WorkflowStep, StageController] = {
            controller.step: controller
            for controller in (
                self.stories,
                self.characters,
                self.storyboard,
                self.detailed,
                self.image_prompts,
                self.video_prompts,
            )
        }

    @classmethod
    def create(cls, config: Optional[Config] = None) -> "PipelineSession":
        """Session wired to the configured backends and environment keys."""
        return cls(config=config)

    @property
    def current_step(self) -> WorkflowStep:
        return self.state.current_step

    def controller(self, step: WorkflowStep) -> Optional[StageController]:
        """Controller for ``step`` (None for the lyrics step)."""
        return self._controllers.get(WorkflowStep(step))

    def set_lyrics(self, lyrics: str) -> None:
        self.state.lyrics = lyrics

    def set_locale(self, locale) -> None:
        """Switch the active locale; content is re-resolved, never regenerated."""
        self.state.locale = Locale(locale)

    def can_advance_from(self, step: WorkflowStep) -> bool:
        if step == WorkflowStep.LYRICS:
            return len(self.state.lyrics.strip()) >= self.config.pipeline.min_lyrics_chars
        return self.controller(step).can_advance

    def can_enter(self, step: WorkflowStep) -> bool:
        """A step is reachable once its predecessor has produced output."""
        step = WorkflowStep(step)
        previous = step.previous
        if previous is None:
            return True
        if previous == WorkflowStep.LYRICS:
            return self.can_advance_from(WorkflowStep.LYRICS)
        return self.controller(previous).has_output

    def advance(self) -> bool:
        """
        Move to the next step and auto-generate there if it is empty.

        Returns:
            True if the step changed
        """
        step = self.state.current_step
        if step.next is None or not self.can_advance_from(step):
            return False
        self.state.reach(step.next)
        logger.info(f"Advanced to {step.next.name}")
        self.enter_current()
        return True

    def go_to(self, step: WorkflowStep) -> bool:
        """Jump to any step already reached."""
        step = WorkflowStep(step)
        if step > self.state.max_reached_step:
            return False
        self.state.current_step = step
        return True

    def enter_current(self) -> bool:
        controller = self.controller(self.state.current_step)
        if controller is None:
            return False
        return controller.enter()

    def run_all(self, story_index: int = 0) -> ProjectState:
        """
        Run every stage headlessly, picking ``story_index`` from the first batch.

        Raises:
            GenerationError: the first stage that fails, with its user message
        """
        if not self.can_advance_from(WorkflowStep.LYRICS):
            raise StageInputError(
                f"Lyrics must be at least {self.config.pipeline.min_lyrics_chars} characters"
            )

        self.state.reach(WorkflowStep.STORIES)
        self._require(self.stories, self.stories.regenerate())
        self.stories.select(story_index)

        for controller in (
            self.characters,
            self.storyboard,
            self.detailed,
            self.image_prompts,
            self.video_prompts,
        ):
            self.state.reach(controller.step)
            self._require(controller, controller.regenerate())
            logger.info(
                f"{controller.step.name}: {len(controller.current_artifacts)} artifacts"
            )
        return self.state

    @staticmethod
    def _require(controller: StageController, ok: bool) -> None:
        if not ok:
            raise GenerationError(
                controller.last_error or f"{controller.step.name} failed",
            )
