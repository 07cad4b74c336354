"""Stage pipeline for MV Director."""

from mvdirector.pipeline.base import StageController
from mvdirector.pipeline.session import PipelineSession
from mvdirector.pipeline.splitter import DurationSplitter, find_duration_violations
from mvdirector.pipeline.stages import (
    CharacterStage,
    DetailedStoryboardStage,
    ImagePromptStage,
    StoryboardStage,
    StoryStage,
    VideoPromptStage,
    apply_prompts,
)

__all__ = [
    "CharacterStage",
    "DetailedStoryboardStage",
    "DurationSplitter",
    "ImagePromptStage",
    "PipelineSession",
    "StageController",
    "StoryStage",
    "StoryboardStage",
    "VideoPromptStage",
    "apply_prompts",
    "find_duration_violations",
]
