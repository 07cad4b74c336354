"""Pydantic models for MV Director stage artifacts and project state."""

import base64
import re
from enum import Enum, IntEnum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from mvdirector.models.localization import Locale, LocalizedModel


class WorkflowStep(IntEnum):
    """Pipeline stages, in order."""

    LYRICS = 1
    STORIES = 2
    CHARACTERS = 3
    STORYBOARD = 4
    DETAILED_STORYBOARD = 5
    IMAGE_PROMPTS = 6
    VIDEO_PROMPTS = 7

    @property
    def next(self) -> Optional["WorkflowStep"]:
        if self is WorkflowStep.VIDEO_PROMPTS:
            return None
        return WorkflowStep(self + 1)

    @property
    def previous(self) -> Optional["WorkflowStep"]:
        if self is WorkflowStep.LYRICS:
            return None
        return WorkflowStep(self - 1)


class AspectRatio(str, Enum):
    """Aspect ratios accepted by the shot image renderer."""

    CINEMASCOPE = "21:9"
    WIDESCREEN = "16:9"
    SQUARE = "1:1"
    PORTRAIT = "9:16"


# Leading numeral of a free-form duration such as "4.5s", "3 sec" or "2초"
_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def parse_duration(value: Optional[str]) -> Optional[float]:
    """Parse the leading number of a duration string, in seconds.

    Returns None if the string has no leading numeral.
    """
    if value is None:
        return None
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        return None
    return float(match.group(1))


class StoryOption(LocalizedModel):
    """A music video story concept."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = ("title", "genre", "synopsis", "mood")

    title: str = ""
    genre: str = ""
    synopsis: str = ""
    mood: str = ""


class Character(LocalizedModel):
    """A cast member of the music video."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "role",
        "visual_description",
        "personality",
        "outfit",
    )

    name: str = ""
    role: str = ""
    visual_description: str = ""
    personality: str = ""
    outfit: str = ""
    keywords: list[str] = Field(default_factory=list)


class GeneratedImage(BaseModel):
    """A rendered still for a shot."""

    data: str  # base64
    mime_type: str = "image/png"

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str = "image/png") -> "GeneratedImage":
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class Scene(LocalizedModel):
    """A storyboard entry: a coarse scene or a detailed shot."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = (
        "visual_action",
        "mood_and_lighting",
        "camera_movement",
    )

    scene_number: int
    lyrics_segment: str = ""
    visual_action: str = ""
    mood_and_lighting: str = ""
    camera_movement: str = ""
    estimated_duration: str = ""
    image_prompt: Optional[str] = None
    video_prompt: Optional[str] = None
    generated_images: list[GeneratedImage] = Field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        return parse_duration(self.estimated_duration)


class ProjectState(BaseModel):
    """The shared, in-memory project document threaded through every stage.

    Each stage controller writes only its own slice.
    """

    current_step: WorkflowStep = WorkflowStep.LYRICS
    max_reached_step: WorkflowStep = WorkflowStep.LYRICS
    locale: Locale = Locale.KO

    lyrics: str = ""
    stories: list[StoryOption] = Field(default_factory=list)
    # None = never attempted, -1 = list populated but nothing chosen
    selected_story_index: Optional[int] = None
    characters: list[Character] = Field(default_factory=list)
    base_scenes: list[Scene] = Field(default_factory=list)
    detailed_scenes: list[Scene] = Field(default_factory=list)

    @property
    def selected_story(self) -> Optional[StoryOption]:
        index = self.selected_story_index
        if index is None or index < 0 or index >= len(self.stories):
            return None
        return self.stories[index]

    def reach(self, step: WorkflowStep) -> None:
        """Move to ``step`` and remember the furthest step reached."""
        self.current_step = step
        if step > self.max_reached_step:
            self.max_reached_step = step
