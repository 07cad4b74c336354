"""Story Agent for music video concept generation."""

import logging

from mvdirector.agents.base import (
    StructuredAgent,
    array_of,
    localized_properties,
    localized_required,
    object_of,
    snake_keys,
)
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import StoryOption

logger = logging.getLogger(__name__)


STORY_FIELDS = {
    "title": {"type": "STRING"},
    "genre": {"type": "STRING"},
    "synopsis": {"type": "STRING"},
    "mood": {"type": "STRING"},
}

BILINGUAL_NOTE = """IMPORTANT: Provide the content in BOTH Korean (_ko) and English (_en).
The Korean version should be natural and creative, not a literal translation."""


class StoryAgent(StructuredAgent):
    """Agent for generating music video story concepts from lyrics."""

    STORY_SCHEMA = localized_properties(STORY_FIELDS)

    def generate_stories(
        self,
        lyrics: str,
        default_locale: Locale,
        count: int = 4,
    ) -> list[StoryOption]:
        """
        Generate a batch of distinct story concepts.

        Args:
            lyrics: Full song lyrics
            default_locale: Locale whose text fills the canonical fields
            count: Number of concepts to request

        Returns:
            List of StoryOption (may differ from ``count`` if the model disagrees)
        """
        prompt = f"""Based on the following song lyrics, generate {count} distinct music video story concepts.
Each concept should have a unique artistic direction (e.g., Narrative, Abstract, Performance-based, Cinematic).

{BILINGUAL_NOTE}

Lyrics:
"{lyrics}"
"""
        schema = array_of(self.STORY_SCHEMA, localized_required(STORY_FIELDS))
        items = self._request(prompt, schema)
        stories = [StoryOption.from_flat(snake_keys(item), default_locale) for item in items]
        if len(stories) != count:
            logger.warning(f"Requested {count} stories, received {len(stories)}")
        return stories

    def expand_custom_story(
        self,
        keywords: str,
        lyrics: str,
        default_locale: Locale,
    ) -> StoryOption:
        """
        Expand a few user keywords into one complete story concept.

        Args:
            keywords: Free-text keywords or a rough idea from the user
            lyrics: Full song lyrics for context
            default_locale: Locale whose text fills the canonical fields

        Returns:
            A single StoryOption with both locales filled
        """
        prompt = f"""Expand the user's keywords into ONE complete music video story concept.
Stay faithful to every keyword; use the lyrics only as supporting context.

Keywords / idea:
{keywords}

{BILINGUAL_NOTE}

Lyrics:
"{lyrics}"
"""
        schema = object_of(self.STORY_SCHEMA, localized_required(STORY_FIELDS))
        item = self._request(prompt, schema)
        return StoryOption.from_flat(snake_keys(item), default_locale)
