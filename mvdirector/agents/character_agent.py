"""Character Agent for casting and refining music video characters."""

import logging
from typing import Optional

from mvdirector.agents.base import (
    StructuredAgent,
    array_of,
    localized_properties,
    localized_required,
    object_of,
    snake_keys,
)
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Character, StoryOption
from mvdirector.services.text_generator import ImageAttachment

logger = logging.getLogger(__name__)


CHARACTER_FIELDS = {
    "name": {"type": "STRING"},
    "role": {"type": "STRING"},
    "visualDescription": {
        "type": "STRING",
        "description": "Face, hair, body type and age, detailed enough for consistent AI image generation",
    },
    "personality": {"type": "STRING"},
    "outfit": {"type": "STRING"},
}

KEYWORDS_PROPERTY = {
    "keywords": {
        "type": "ARRAY",
        "items": {"type": "STRING"},
        "description": "Short visual keywords (English) for image prompts",
    },
}

SYSTEM_PROMPT = """You are a casting director for music videos. Characters must be visually distinctive
and consistent so that every shot of the video can reproduce them exactly.
Provide every text field in BOTH Korean (_ko) and English (_en). Output JSON only."""


class CharacterAgent(StructuredAgent):
    """Agent for generating the cast and regenerating single characters."""

    SYSTEM_PROMPT = SYSTEM_PROMPT

    def _schema_properties(self) -> dict:
        properties = localized_properties(CHARACTER_FIELDS)
        properties.update(KEYWORDS_PROPERTY)
        return properties

    def _required(self) -> list[str]:
        return localized_required(CHARACTER_FIELDS) + ["keywords"]

    def _to_character(self, item: dict, default_locale: Locale) -> Character:
        data = snake_keys(item)
        raw_keywords = data.pop("keywords", None) or []
        if isinstance(raw_keywords, str):
            raw_keywords = raw_keywords.split(",")
        keywords = [str(k).strip() for k in raw_keywords if str(k).strip()]
        return Character.from_flat(data, default_locale, keywords=keywords)

    def generate_characters(
        self,
        story: StoryOption,
        lyrics: str,
        locale: Locale,
        default_locale: Locale,
    ) -> list[Character]:
        """
        Create the main cast for a story.

        Args:
            story: The selected story concept
            lyrics: Full song lyrics (only the opening is used as context)
            locale: Active UI locale, used to render the story context
            default_locale: Locale whose text fills the canonical fields

        Returns:
            1-3 characters
        """
        pipeline = self.config.pipeline
        lyrics_context = lyrics[: pipeline.lyrics_context_chars]

        prompt = f"""Create a list of main characters ({pipeline.min_characters}-{pipeline.max_characters} main characters) for a music video based on this story concept.

Story Title: {story.text('title', locale)}
Synopsis: {story.text('synopsis', locale)}
Mood: {story.text('mood', locale)}

Lyrics Context: {lyrics_context}...
"""
        schema = array_of(self._schema_properties(), self._required())
        items = self._request(prompt, schema)
        characters = [self._to_character(item, default_locale) for item in items]
        if len(characters) > pipeline.max_characters:
            logger.warning(
                f"Received {len(characters)} characters, keeping first {pipeline.max_characters}"
            )
            characters = characters[: pipeline.max_characters]
        return characters

    def regenerate_character(
        self,
        character: Character,
        instruction: str,
        locale: Locale,
        default_locale: Locale,
        story: Optional[StoryOption] = None,
        reference_image: Optional[ImageAttachment] = None,
    ) -> Character:
        """
        Rewrite one character following a free-text instruction.

        Args:
            character: The character as it currently stands
            instruction: What the user wants changed
            locale: Active UI locale, used to render the current values
            default_locale: Locale whose text fills the canonical fields
            story: Optional story for context
            reference_image: Optional image the new look should follow

        Returns:
            The replacement character (all fields, keywords included)
        """
        keywords = ", ".join(character.keywords) if character.keywords else "(none)"
        story_context = ""
        if story is not None:
            story_context = (
                f"\nStory: {story.text('title', locale)} - {story.text('synopsis', locale)}\n"
            )

        reference_note = ""
        if reference_image is not None:
            reference_note = (
                "\nREFERENCE IMAGE ABOVE: Base the character's visual description and outfit "
                "on this image (face, hair, clothing, colors).\n"
            )

        prompt = f"""Revise this music video character according to the user's instruction.
Keep everything the instruction does not ask to change. Return the complete character.
{story_context}
Current character:
- Name: {character.text('name', locale)}
- Role: {character.text('role', locale)}
- Visual Description: {character.text('visual_description', locale)}
- Personality: {character.text('personality', locale)}
- Outfit: {character.text('outfit', locale)}
- Keywords: {keywords}
{reference_note}
Instruction:
{instruction or "Refine and enrich the character while keeping its identity."}
"""
        schema = object_of(self._schema_properties(), self._required())
        attachments = [reference_image] if reference_image is not None else None
        item = self._request(prompt, schema, attachments=attachments)
        return self._to_character(item, default_locale)
