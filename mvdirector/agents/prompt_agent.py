"""Prompt Agent for per-shot image and video generation prompts."""

import logging

from mvdirector.agents.base import StructuredAgent, array_of
from mvdirector.errors import MalformedResponseError
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Scene, StoryOption

logger = logging.getLogger(__name__)


def _parse_assignments(items: list[dict], prompt_key: str) -> list[tuple[int, str]]:
    """Turn ``[{sceneNumber, <prompt_key>}]`` into ``(scene_number, prompt)`` pairs."""
    assignments = []
    problems = []
    for index, item in enumerate(items):
        try:
            scene_number = int(item["sceneNumber"])
        except (TypeError, ValueError):
            problems.append(f"item {index + 1}: sceneNumber is not an integer")
            continue
        prompt = str(item[prompt_key]).strip()
        if not prompt:
            problems.append(f"item {index + 1}: empty {prompt_key}")
            continue
        assignments.append((scene_number, prompt))
    if problems:
        raise MalformedResponseError("Prompt items are invalid", problems)
    return assignments


class PromptAgent(StructuredAgent):
    """Agent for writing image and video prompts for each shot."""

    def generate_image_prompts(
        self,
        scenes: list[Scene],
        story: StoryOption,
        locale: Locale,
    ) -> list[tuple[int, str]]:
        """
        Write one text-to-image prompt per shot.

        Returns:
            (scene_number, image_prompt) pairs as returned by the model
        """
        scenes_context = "\n".join(
            f"Scene {s.scene_number} ({s.estimated_duration}): "
            f"Action: {s.text('visual_action', Locale.EN)}, "
            f"Mood: {s.text('mood_and_lighting', Locale.EN)}"
            for s in scenes
        )

        prompt = f"""Generate highly detailed AI image generation prompts for each scene in the storyboard.
The style should be consistent with the story mood: {story.text('mood', locale)}.
Include details about lighting, camera angle, texture, and color palette.
Write the prompts in English.

The scenes are short cuts (under {self.config.pipeline.max_shot_duration:g}s). Focus on the static visual quality of this specific moment.

Scenes:
{scenes_context}
"""
        schema = array_of(
            {
                "sceneNumber": {"type": "INTEGER"},
                "imagePrompt": {
                    "type": "STRING",
                    "description": "A high-quality text-to-image prompt (Midjourney/Stable Diffusion style)",
                },
            },
            ["sceneNumber", "imagePrompt"],
        )
        return _parse_assignments(self._request(prompt, schema), "imagePrompt")

    def generate_video_prompts(self, scenes: list[Scene]) -> list[tuple[int, str]]:
        """
        Write one text-to-video prompt per shot.

        Returns:
            (scene_number, video_prompt) pairs as returned by the model
        """
        scenes_context = "\n".join(
            f"Scene {s.scene_number} ({s.estimated_duration}): "
            f"Visual: {s.text('visual_action', Locale.EN)}, "
            f"Camera: {s.text('camera_movement', Locale.EN)}, "
            f"Base Image Prompt: {s.image_prompt or ''}"
            for s in scenes
        )

        prompt = f"""Generate specific AI video generation prompts (like for Sora, Runway, or Veo) for each scene.
These are short cuts (under {self.config.pipeline.max_shot_duration:g}s). Focus heavily on the MOTION, CAMERA MOVEMENT, and PHYSICS of the scene within that short timeframe.
Write the prompts in English.

Scenes:
{scenes_context}
"""
        schema = array_of(
            {
                "sceneNumber": {"type": "INTEGER"},
                "videoPrompt": {
                    "type": "STRING",
                    "description": "A detailed text-to-video prompt focusing on motion and camera physics",
                },
            },
            ["sceneNumber", "videoPrompt"],
        )
        return _parse_assignments(self._request(prompt, schema), "videoPrompt")
