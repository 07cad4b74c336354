"""Duration-constrained splitting of the base storyboard into shots."""

import logging

from mvdirector.agents.gateway import GenerationGateway, StageKind
from mvdirector.agents.storyboard_agent import renumber
from mvdirector.errors import MalformedResponseError
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Character, Scene, StoryOption

logger = logging.getLogger(__name__)


def find_duration_violations(shots: list[Scene], max_duration: float) -> list[str]:
    """Describe every shot whose duration is missing or above ``max_duration``."""
    problems = []
    for position, shot in enumerate(shots, start=1):
        seconds = shot.duration_seconds
        if seconds is None:
            problems.append(f"shot {position}: unparseable duration '{shot.estimated_duration}'")
        elif seconds > max_duration:
            problems.append(
                f"shot {position}: {shot.estimated_duration} exceeds {max_duration:g}s"
            )
    return problems


class DurationSplitter:
    """Turns coarse scenes into shots of at most ``max_duration`` seconds.

    The splitting itself is delegated to the generation backend; this class
    enforces the result: every shot within the bound, dense numbering from 1.
    """

    def __init__(self, max_duration: float = 5.0):
        self.max_duration = max_duration

    def enforce(self, shots: list[Scene], base_count: int) -> list[Scene]:
        """Validate durations and renumber.

        Raises:
            MalformedResponseError: a shot has no parseable duration or is too long
        """
        problems = find_duration_violations(shots, self.max_duration)
        if problems:
            raise MalformedResponseError(
                f"{len(problems)} shot(s) violate the {self.max_duration:g}s limit",
                problems,
            )

        if len(shots) < base_count:
            logger.warning(
                f"Detailed storyboard has fewer shots ({len(shots)}) than base scenes ({base_count})"
            )

        return renumber(shots)

    def split(
        self,
        gateway: GenerationGateway,
        base_scenes: list[Scene],
        story: StoryOption,
        characters: list[Character],
        locale: Locale,
        default_locale: Locale,
    ) -> list[Scene]:
        """Request the shot list and enforce the duration bound on it."""
        shots = gateway.generate(
            StageKind.DETAILED_STORYBOARD,
            base_scenes=base_scenes,
            story=story,
            characters=characters,
            locale=locale,
            default_locale=default_locale,
            max_duration=self.max_duration,
        )
        shots = self.enforce(shots, len(base_scenes))
        logger.info(f"Split {len(base_scenes)} base scenes into {len(shots)} shots")
        return shots
