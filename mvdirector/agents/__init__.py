"""AI Agents for MV Director."""

from mvdirector.agents.character_agent import CharacterAgent
from mvdirector.agents.gateway import GenerationGateway, StageKind
from mvdirector.agents.prompt_agent import PromptAgent
from mvdirector.agents.story_agent import StoryAgent
from mvdirector.agents.storyboard_agent import StoryboardAgent

__all__ = [
    "CharacterAgent",
    "GenerationGateway",
    "PromptAgent",
    "StageKind",
    "StoryAgent",
    "StoryboardAgent",
]
