"""Storyboard Agent for coarse scenes and detailed shot lists."""

import logging

from mvdirector.agents.base import (
    StructuredAgent,
    array_of,
    localized_properties,
    localized_required,
    snake_keys,
)
from mvdirector.errors import MalformedResponseError
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Character, Scene, StoryOption

logger = logging.getLogger(__name__)


SCENE_LOCALIZED_FIELDS = {
    "visualAction": {"type": "STRING", "description": "What happens in the scene visually"},
    "moodAndLighting": {"type": "STRING"},
    "cameraMovement": {"type": "STRING"},
}

SHOT_LOCALIZED_FIELDS = {
    "visualAction": {"type": "STRING", "description": "Specific, short visual action for this cut"},
    "moodAndLighting": {"type": "STRING"},
    "cameraMovement": {
        "type": "STRING",
        "description": "Dynamic camera move (e.g., Quick Zoom, Pan, Handheld)",
    },
}

SCENE_PLAIN_REQUIRED = ["sceneNumber", "lyricsSegment", "estimatedDuration"]


def character_context(characters: list[Character], locale: Locale) -> str:
    return "\n".join(
        f"{c.text('name', locale)} ({c.text('role', locale)}): {c.text('visual_description', locale)}"
        for c in characters
    )


def parse_scenes(items: list[dict], default_locale: Locale) -> list[Scene]:
    """Build Scene records from payload items (scene numbers coerced to int)."""
    scenes = []
    problems = []
    for index, item in enumerate(items):
        data = snake_keys(item)
        try:
            scene_number = int(data.pop("scene_number"))
        except (TypeError, ValueError):
            problems.append(f"item {index + 1}: sceneNumber is not an integer")
            continue
        scenes.append(Scene.from_flat(
            data,
            default_locale,
            scene_number=scene_number,
            lyrics_segment=str(data.get("lyrics_segment") or ""),
            estimated_duration=str(data.get("estimated_duration") or ""),
        ))
    if problems:
        raise MalformedResponseError("Scene numbers are not integers", problems)
    return scenes


def renumber(scenes: list[Scene]) -> list[Scene]:
    """Assign a dense 1-based sequence in list order."""
    for i, scene in enumerate(scenes):
        scene.scene_number = i + 1
    return scenes


class StoryboardAgent(StructuredAgent):
    """Agent for the base storyboard and the detailed shooting script."""

    def _scene_schema(self, localized_fields: dict, duration_description: str) -> dict:
        properties = {
            "sceneNumber": {"type": "INTEGER"},
            "lyricsSegment": {
                "type": "STRING",
                "description": "The specific line(s) of lyrics this scene covers",
            },
            "estimatedDuration": {"type": "STRING", "description": duration_description},
        }
        properties.update(localized_properties(localized_fields))
        required = SCENE_PLAIN_REQUIRED + localized_required(localized_fields)
        return array_of(properties, required)

    def generate_storyboard(
        self,
        lyrics: str,
        story: StoryOption,
        characters: list[Character],
        locale: Locale,
        default_locale: Locale,
    ) -> list[Scene]:
        """
        Create the coarse storyboard, one scene per narrative beat.

        Returns:
            Scenes renumbered 1..N in narrative order
        """
        pipeline = self.config.pipeline
        prompt = f"""Create a detailed storyboard ({pipeline.min_base_scenes} to {pipeline.max_base_scenes} scenes) for a music video.
Match scenes to the lyrics progression.
Provide visualAction, moodAndLighting and cameraMovement in BOTH Korean (_ko) and English (_en).

Story: {story.text('title', locale)} - {story.text('synopsis', locale)}
Characters:
{character_context(characters, locale)}

Full Lyrics:
{lyrics}
"""
        schema = self._scene_schema(SCENE_LOCALIZED_FIELDS, "Approximate length, e.g. '12s'")
        items = self._request(prompt, schema)
        return renumber(parse_scenes(items, default_locale))

    def generate_detailed_storyboard(
        self,
        base_scenes: list[Scene],
        story: StoryOption,
        characters: list[Character],
        locale: Locale,
        default_locale: Locale,
        max_duration: float,
    ) -> list[Scene]:
        """
        Split the base storyboard into short cuts.

        The returned list is in the model's order and numbering; the splitter
        validates durations and renumbers.
        """
        limit = f"{max_duration:g}"
        base_context = "\n".join(
            f"Base Scene {s.scene_number} ({s.estimated_duration}): "
            f"{s.text('visual_action', locale)} [Lyrics: {s.lyrics_segment}]"
            for s in base_scenes
        )

        prompt = f"""You are a professional Music Video Editor and Director.
Your task is to REGENERATE the "Base Storyboard" into a "Detailed Shooting Script" by splitting scenes into smaller cuts.

CRITICAL RULES:
1. **MAX DURATION**: Every single cut must be **{limit} seconds or less**.
2. **SPLIT & REFINE**: If a base scene suggests a long action, break it down into multiple cuts (e.g., Wide shot -> Close up -> Reaction shot).
3. **CONTINUITY**: The sequence of cuts must tell the same story as the base scene, in the same order, and carry its lyrics.
4. **QUANTITY**: Expect to generate more scenes than the input (e.g., 8 base scenes -> 20 detailed cuts).
5. **NUMBERING**: Number the cuts 1, 2, 3... continuously across the whole script.
6. Provide visualAction, moodAndLighting and cameraMovement in BOTH Korean (_ko) and English (_en).

Context:
Story: {story.text('title', locale)}
Mood: {story.text('mood', locale)}
Characters:
{character_context(characters, locale)}

Base Storyboard to Regenerate:
{base_context}
"""
        schema = self._scene_schema(
            SHOT_LOCALIZED_FIELDS,
            f"Must be {limit} seconds or less (e.g., '2s', '4.5s')",
        )
        items = self._request(prompt, schema)
        return parse_scenes(items, default_locale)
