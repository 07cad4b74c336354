"""Tests for markdown / text export."""

from datetime import datetime

from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Character, ProjectState, Scene, StoryOption
from mvdirector.services.markdown_exporter import (
    export_characters,
    export_detailed_storyboard,
    export_image_prompt_list,
    export_project,
    export_stories,
    export_storyboard,
    export_video_prompt_list,
)


def _state():
    story = StoryOption(title="비", genre="드라마", synopsis="재회", mood="애틋한")
    story.set_localized("title", Locale.EN, "Rain")
    return ProjectState(
        lyrics="la la la",
        stories=[story],
        selected_story_index=0,
        characters=[Character(name="Mina", role="Lead", keywords=["rain"])],
        base_scenes=[Scene(scene_number=1, estimated_duration="10s", lyrics_segment="la")],
        detailed_scenes=[
            Scene(scene_number=1, estimated_duration="4s", image_prompt="alley", video_prompt="dolly"),
            Scene(scene_number=2, estimated_duration="3s"),
        ],
    )


class TestExportProject:
    def test_sections(self):
        md = export_project(_state(), Locale.EN, generated_at=datetime(2024, 5, 1, 12, 0, 0))

        assert md.startswith("# MV Director AI Project")
        assert "**Date:** 2024-05-01 12:00:00" in md
        assert "## 2. Selected Story: Rain" in md
        assert "### Mina (Lead)" in md
        assert "- **Keywords:** rain" in md
        assert "### Scene 1 (10s)" in md
        assert "### Cut 1 (4s)" in md
        assert "**Image Prompt:**\n> alley" in md
        assert "**Video Prompt:**\n> dolly" in md

    def test_uses_state_locale_by_default(self):
        md = export_project(_state())

        assert "## 2. Selected Story: 비" in md

    def test_empty_project(self):
        md = export_project(ProjectState())

        assert "## 1. Lyrics" not in md
        assert "Cut" not in md


def test_prompt_lists():
    scenes = _state().detailed_scenes

    assert export_image_prompt_list(scenes) == "1. alley\n2. \n"
    assert export_video_prompt_list(scenes) == "1. dolly\n2. \n"


def test_export_stories():
    md = export_stories([StoryOption(title="A", genre="Pop")], "la la", Locale.EN)

    assert "## Story 1: A" in md
    assert "**Genre:** Pop" in md


class TestStepExports:
    def test_export_characters(self):
        state = _state()
        state.characters.append(Character(name="Joon", role="Friend", outfit="Grey hoodie"))

        md = export_characters(state.characters, state.selected_story, Locale.EN)

        assert md.startswith('# Characters for "Rain"\n\n')
        assert "## Mina (Lead)\n" in md
        assert "## Joon (Friend)\n" in md
        assert "- **Outfit:** Grey hoodie\n" in md
        assert md.count("- **Keywords:**") == 1
        assert md.count("\n---\n") == 2

    def test_export_storyboard(self):
        state = _state()
        scene = state.base_scenes[0]
        scene.visual_action = "She runs"
        scene.camera_movement = "Tracking"

        md = export_storyboard(state.base_scenes, state.selected_story, Locale.KO)

        assert md.startswith('# Storyboard for "비"\n\n')
        assert "## Scene 1 (10s)\n" in md
        assert "- **Action:** She runs\n" in md
        assert "- **Camera:** Tracking\n" in md
        assert "- **Lyrics:** la\n" in md

    def test_export_detailed_storyboard_skips_missing_lyrics(self):
        state = _state()
        state.detailed_scenes[0].lyrics_segment = "first line"

        md = export_detailed_storyboard(state.detailed_scenes, state.selected_story, Locale.EN)

        assert md.startswith('# Detailed Storyboard (Shooting Script) for "Rain"\n\n')
        assert "## Cut 1 (4s)\n" in md
        assert "## Cut 2 (3s)\n" in md
        assert md.count("- **Lyrics:**") == 1
        assert "- **Lyrics:** first line\n" in md

    def test_without_story(self):
        assert export_storyboard([], None, Locale.EN) == '# Storyboard for ""\n\n'
