"""Tests for the pipeline stage controllers."""

from unittest.mock import MagicMock

import pytest

from conftest import character_item, scene_item, story_item

from mvdirector.agents.gateway import GenerationGateway
from mvdirector.errors import ERROR_MESSAGES, CapabilityError, EmptyResponseError
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Character, Scene, StoryOption
from mvdirector.pipeline.stages import apply_prompts
from mvdirector.services.credentials import StaticCredentialProvider
from mvdirector.services.image_generator import ImageGenerator


def _with_story(session):
    session.state.stories = [StoryOption(title="Rain")]
    session.state.selected_story_index = 0


def _with_shots(session, count=3):
    _with_story(session)
    session.state.detailed_scenes = [
        Scene(scene_number=i + 1, estimated_duration="3s", visual_action=f"Action {i + 1}")
        for i in range(count)
    ]


class TestCredentialGate:
    def test_refuses_without_credential(self, session, text_generator):
        session.stories.credentials = StaticCredentialProvider("")

        assert session.stories.regenerate() is False

        assert text_generator.requests == []
        assert session.stories.is_loading is False
        assert session.stories.last_error_kind == "missing_credential"
        assert session.state.stories == []

    def test_error_message_follows_locale(self, session):
        session.stories.credentials = StaticCredentialProvider("")
        session.set_locale("en")

        session.stories.regenerate()

        assert session.stories.last_error.startswith("No API key")

    def test_missing_inputs(self, session, text_generator):
        session.state.lyrics = "   "

        assert session.stories.regenerate() is False
        assert session.stories.last_error_kind == "missing_inputs"
        assert text_generator.requests == []


class TestStoryStage:
    def test_first_batch_uses_primary_locale(self, session, text_generator):
        session.set_locale("en")
        text_generator.queue([story_item("Rain"), story_item("Neon")])

        assert session.stories.regenerate() is True

        assert session.state.stories[0].title == "Rain (ko)"
        assert session.state.selected_story_index == -1
        assert session.stories.can_advance is False

    def test_regeneration_appends(self, session, text_generator):
        text_generator.queue([story_item("A"), story_item("B")])
        session.stories.regenerate()
        first = list(session.state.stories)
        session.stories.select(1)
        session.set_locale("en")

        text_generator.queue([story_item("C"), story_item("D")])
        session.stories.regenerate()

        assert len(session.state.stories) == 4
        assert session.state.stories[:2] == first
        assert session.state.selected_story_index == 1
        # Later batches use the active locale for canonical fields
        assert session.state.stories[2].title == "C"

    def test_failed_regeneration_keeps_stories(self, session, text_generator):
        text_generator.queue([story_item("A")])
        session.stories.regenerate()

        text_generator.queue(EmptyResponseError("nothing"))
        assert session.stories.regenerate() is False

        assert len(session.state.stories) == 1
        assert session.stories.last_error_kind == "empty_response"
        assert session.stories.is_loading is False

    def test_select(self, session):
        session.state.stories = [StoryOption(title="A"), StoryOption(title="B")]

        session.stories.select(1)
        assert session.stories.selected_story.title == "B"
        assert session.stories.can_advance is True

        session.stories.select(-1)
        assert session.stories.selected_story is None
        assert session.stories.can_advance is False

        with pytest.raises(IndexError):
            session.stories.select(2)

    def test_add_custom_story(self, session):
        index = session.stories.add_custom_story("Snow", "A quiet winter walk.")

        story = session.state.stories[index]
        assert session.state.selected_story_index == index
        assert story.genre == "Custom"
        assert story.mood == "Custom"
        assert story.text("title", Locale.EN) == "Snow"
        assert story.text("title", Locale.KO) == "Snow"

    @pytest.mark.parametrize("title,synopsis", [("", "x"), ("x", "  ")])
    def test_custom_story_requires_title_and_synopsis(self, session, title, synopsis):
        with pytest.raises(ValueError):
            session.stories.add_custom_story(title, synopsis)
        assert session.state.stories == []

    def test_expand_custom_story_appends_and_selects(self, session, text_generator):
        session.state.stories = [StoryOption(title="A")]
        text_generator.queue(story_item("Umbrella"))

        assert session.stories.expand_custom_story("umbrella, red") is True

        assert session.state.selected_story_index == 1
        assert session.stories.selected_story.title == "Umbrella (ko)"


class TestCharacterStage:
    def test_regenerate_replaces_roster(self, session, text_generator):
        _with_story(session)
        session.state.characters = [Character(name="Old", keywords=["stale", "ghost"])]
        text_generator.queue([character_item("A"), character_item("B")])

        assert session.characters.regenerate() is True

        roster = session.state.characters
        assert [c.name for c in roster] == ["A (ko)", "B (ko)"]
        assert all(c.keywords == ["rain", "umbrella"] for c in roster)
        assert not any("stale" in c.keywords for c in roster)

    def test_regenerate_character_replaces_one_slot(self, session, text_generator):
        _with_story(session)
        session.state.characters = [Character(name="A"), Character(name="B"), Character(name="C")]
        untouched = session.state.characters[0]
        session.set_locale("en")
        text_generator.queue(character_item("B2", keywords=["neon"]))

        assert session.characters.regenerate_character(1, "more neon") is True

        roster = session.state.characters
        assert [c.name for c in roster] == ["A", "B2", "C"]
        assert roster[0] is untouched
        assert roster[1].keywords == ["neon"]

    def test_regenerate_character_failure_keeps_slot(self, session, text_generator):
        _with_story(session)
        original = Character(name="A")
        session.state.characters = [original]
        text_generator.queue(CapabilityError("boom"))

        assert session.characters.regenerate_character(0, "x") is False

        assert session.state.characters == [original]
        assert session.characters.last_error_kind == "capability"

    def test_regenerate_character_bad_index(self, session):
        with pytest.raises(IndexError):
            session.characters.regenerate_character(0, "x")

    def test_local_edits(self, session):
        stage = session.characters
        index = stage.add_character()
        assert session.state.characters[index].name == "새 인물"

        stage.edit_character(index, name="Mina", keywords="rain, neon ,")
        character = session.state.characters[index]
        assert character.text("name", Locale.EN) == "Mina"
        assert character.keywords == ["rain", "neon"]

        with pytest.raises(KeyError):
            stage.edit_character(index, age="20")

        stage.delete_character(index)
        assert session.state.characters == []


class TestStoryboardStage:
    def test_replaces_and_renumbers(self, session, text_generator):
        _with_story(session)
        session.state.base_scenes = [Scene(scene_number=1)]
        text_generator.queue([scene_item(5, "10s"), scene_item(9, "12s")])

        assert session.storyboard.regenerate() is True

        assert [s.scene_number for s in session.state.base_scenes] == [1, 2]

    def test_needs_selected_story(self, session, text_generator):
        assert session.storyboard.regenerate() is False
        assert session.storyboard.last_error_kind == "missing_inputs"


class TestDetailedStoryboardStage:
    def test_output_is_bounded_and_dense(self, session, text_generator):
        _with_story(session)
        session.state.base_scenes = [
            Scene(scene_number=1, estimated_duration="10s"),
            Scene(scene_number=2, estimated_duration="8s"),
            Scene(scene_number=3, estimated_duration="3s"),
        ]
        text_generator.queue([scene_item(4, "4s"), scene_item(8, "5s"), scene_item(9, "2.5s")])

        assert session.detailed.regenerate() is True

        shots = session.state.detailed_scenes
        assert [s.scene_number for s in shots] == [1, 2, 3]
        assert all(s.duration_seconds <= 5.0 for s in shots)
        instruction = text_generator.requests[0].instruction
        assert "Base Scene 1 (10s)" in instruction
        assert "Base Scene 3 (3s)" in instruction

    def test_violation_clears_previous_list(self, session, text_generator):
        _with_shots(session)
        session.state.base_scenes = [Scene(scene_number=1, estimated_duration="12s")]
        text_generator.queue([scene_item(1, "4s"), scene_item(2, "7s")])

        assert session.detailed.regenerate() is False

        assert session.state.detailed_scenes == []
        assert session.detailed.last_error_kind == "malformed_response"
        assert "shot 2" in session.detailed.last_error


class TestApplyPrompts:
    def test_matches_by_scene_number(self):
        scenes = [Scene(scene_number=1, image_prompt="keep"), Scene(scene_number=2)]

        dropped = apply_prompts(scenes, [(2, "two"), (9, "nine")], "image_prompt")

        assert dropped == 1
        assert scenes[0].image_prompt == "keep"
        assert scenes[1].image_prompt == "two"


class TestImagePromptStage:
    def test_prompts_follow_scene_number_not_position(self, session, text_generator):
        _with_shots(session)
        text_generator.queue([
            {"sceneNumber": 3, "imagePrompt": "third"},
            {"sceneNumber": 1, "imagePrompt": "first"},
            {"sceneNumber": 42, "imagePrompt": "ghost"},
        ])

        assert session.image_prompts.regenerate() is True

        shots = session.state.detailed_scenes
        assert [s.image_prompt for s in shots] == ["first", None, "third"]
        assert session.image_prompts.unmatched_count == 1
        assert session.image_prompts.last_warning
        assert session.image_prompts.can_advance is True

    def test_enter_generates_only_when_no_prompt(self, session, text_generator):
        _with_shots(session)
        session.state.detailed_scenes[1].image_prompt = "existing"

        assert session.image_prompts.enter() is False
        assert text_generator.requests == []

    def test_edit_prompt(self, session):
        _with_shots(session)

        session.image_prompts.edit_prompt(0, "  hand written  ")

        assert session.state.detailed_scenes[0].image_prompt == "hand written"

    def test_render_appends_images(self, session, image_generator):
        _with_shots(session)
        shot = session.state.detailed_scenes[0]
        shot.image_prompt = "rainy alley"

        assert session.image_prompts.render_images(0, "16:9", 2) is True
        assert session.image_prompts.render_images(0, "1:1", 1) is True

        assert len(shot.generated_images) == 3
        assert image_generator.calls[0]["prompt"] == "rainy alley"
        assert session.state.detailed_scenes[1].generated_images == []
        assert session.image_prompts.rendering == set()

    def test_render_falls_back_to_visual_action(self, session, image_generator):
        _with_shots(session)

        session.image_prompts.render_images(1)

        assert image_generator.calls[0]["prompt"] == "Action 2"

    @pytest.mark.parametrize("ratio,count", [("4:3", 1), ("16:9", 0), ("16:9", 21)])
    def test_render_rejects_bad_arguments(self, session, image_generator, ratio, count):
        _with_shots(session)

        with pytest.raises(ValueError):
            session.image_prompts.render_images(0, ratio, count)
        assert image_generator.calls == []

    def test_render_without_credential(self, session, image_generator):
        _with_shots(session)
        session.image_prompts.image_credentials = StaticCredentialProvider("")

        assert session.image_prompts.render_images(0) is False

        assert image_generator.calls == []
        assert 0 in session.image_prompts.render_errors

    def test_render_failure_keeps_images(self, session, image_generator):
        _with_shots(session)
        session.image_prompts.render_images(0)
        image_generator.error = CapabilityError("blocked")

        assert session.image_prompts.render_images(0) is False

        assert len(session.state.detailed_scenes[0].generated_images) == 1
        assert session.image_prompts.render_errors[0]
        assert session.image_prompts.rendering == set()

    def test_render_refuses_shot_without_prompt(self, session, test_config, text_generator):
        client = MagicMock()
        generator = ImageGenerator(test_config, StaticCredentialProvider("test-key"))
        generator._client = client
        generator._client_key = "test-key"
        session.image_prompts.gateway = GenerationGateway(test_config, text_generator, generator)
        _with_story(session)
        session.state.detailed_scenes = [Scene(scene_number=1, estimated_duration="3s")]
        session.set_locale("en")

        assert session.image_prompts.render_images(0) is False

        assert session.image_prompts.render_errors[0] == ERROR_MESSAGES["empty_prompt"]["en"]
        assert client.models.generate_content.call_count == 0
        assert session.state.detailed_scenes[0].generated_images == []
        assert session.image_prompts.rendering == set()


class TestVideoPromptStage:
    def test_matches_and_is_terminal(self, session, text_generator):
        _with_shots(session, count=2)
        text_generator.queue([
            {"sceneNumber": 2, "videoPrompt": "pan left"},
            {"sceneNumber": 1, "videoPrompt": "dolly in"},
        ])

        assert session.video_prompts.regenerate() is True

        assert [s.video_prompt for s in session.state.detailed_scenes] == ["dolly in", "pan left"]
        assert session.video_prompts.unmatched_count == 0
        assert session.video_prompts.can_advance is False
