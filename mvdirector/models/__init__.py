"""Data models for MV Director."""

from mvdirector.models.localization import Locale, LocalizedModel, resolve
from mvdirector.models.schemas import (
    AspectRatio,
    Character,
    GeneratedImage,
    ProjectState,
    Scene,
    StoryOption,
    WorkflowStep,
    parse_duration,
)

__all__ = [
    "AspectRatio",
    "Character",
    "GeneratedImage",
    "Locale",
    "LocalizedModel",
    "ProjectState",
    "Scene",
    "StoryOption",
    "WorkflowStep",
    "parse_duration",
    "resolve",
]
