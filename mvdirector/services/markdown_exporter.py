"""Markdown / plain-text export of a project."""

from datetime import datetime
from typing import Optional

from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Character, ProjectState, Scene, StoryOption


def export_stories(stories: list[StoryOption], lyrics: str, locale: Locale) -> str:
    """Story concepts only."""
    quoted = lyrics[:200].replace("\n", "\n> ")
    md = f"# Music Video Story Concepts\n\nGenerated for Lyrics:\n> {quoted}...\n\n---\n\n"
    for idx, story in enumerate(stories):
        md += f"## Story {idx + 1}: {story.text('title', locale)}\n\n"
        md += f"**Genre:** {story.text('genre', locale)}\n"
        md += f"**Mood:** {story.text('mood', locale)}\n\n"
        md += f"**Synopsis:**\n{story.text('synopsis', locale)}\n\n"
        md += "---\n\n"
    return md


def _character_block(character: Character, locale: Locale, heading: str = "###") -> str:
    md = f"{heading} {character.text('name', locale)} ({character.text('role', locale)})\n"
    md += f"- **Visual:** {character.text('visual_description', locale)}\n"
    md += f"- **Personality:** {character.text('personality', locale)}\n"
    md += f"- **Outfit:** {character.text('outfit', locale)}\n"
    if character.keywords:
        md += f"- **Keywords:** {', '.join(character.keywords)}\n"
    return md + "\n"


def _scene_block(scene: Scene, locale: Locale, label: str, with_prompts: bool) -> str:
    md = f"### {label} {scene.scene_number} ({scene.estimated_duration})\n"
    md += f"- **Action:** {scene.text('visual_action', locale)}\n"
    md += f"- **Mood:** {scene.text('mood_and_lighting', locale)}\n"
    md += f"- **Camera:** {scene.text('camera_movement', locale)}\n"
    if not with_prompts:
        md += f"- **Lyrics:** {scene.lyrics_segment}\n"
    if with_prompts and scene.image_prompt:
        md += f"\n**Image Prompt:**\n> {scene.image_prompt}\n"
    if with_prompts and scene.video_prompt:
        md += f"\n**Video Prompt:**\n> {scene.video_prompt}\n"
    return md + "\n"


def export_project(
    state: ProjectState,
    locale: Optional[Locale] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Full project document: lyrics, story, cast, storyboards and prompts."""
    locale = locale or state.locale
    generated_at = generated_at or datetime.now()

    md = "# MV Director AI Project\n\n"
    md += f"**Date:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n\n"

    if state.lyrics:
        md += f"## 1. Lyrics\n\n{state.lyrics}\n\n---\n\n"

    story = state.selected_story
    if story is not None:
        md += f"## 2. Selected Story: {story.text('title', locale)}\n\n"
        md += f"**Genre:** {story.text('genre', locale)}\n"
        md += f"**Mood:** {story.text('mood', locale)}\n"
        md += f"**Synopsis:**\n{story.text('synopsis', locale)}\n\n---\n\n"

    if state.characters:
        md += "## 3. Characters\n\n"
        for character in state.characters:
            md += _character_block(character, locale)
        md += "---\n\n"

    if state.base_scenes:
        md += "## 4. Base Storyboard\n\n"
        for scene in state.base_scenes:
            md += _scene_block(scene, locale, "Scene", with_prompts=False)
        md += "---\n\n"

    if state.detailed_scenes:
        md += "## 5-7. Detailed Storyboard & Prompts (Shooting Script)\n\n"
        for scene in state.detailed_scenes:
            md += _scene_block(scene, locale, "Cut", with_prompts=True)
        md += "---\n\n"

    return md


def export_image_prompt_list(scenes: list[Scene]) -> str:
    """Numbered plain-text list of image prompts, one per shot."""
    return "".join(f"{i + 1}. {scene.image_prompt or ''}\n" for i, scene in enumerate(scenes))


def export_video_prompt_list(scenes: list[Scene]) -> str:
    """Numbered plain-text list of video prompts, one per shot."""
    return "".join(f"{i + 1}. {scene.video_prompt or ''}\n" for i, scene in enumerate(scenes))


def export_characters(characters: list[Character], story: Optional[StoryOption], locale: Locale) -> str:
    """Cast sheet for one story."""
    title = story.text("title", locale) if story is not None else ""
    md = f'# Characters for "{title}"\n\n'
    for character in characters:
        md += f"## {character.text('name', locale)} ({character.text('role', locale)})\n"
        md += f"- **Visual:** {character.text('visual_description', locale)}\n"
        md += f"- **Personality:** {character.text('personality', locale)}\n"
        md += f"- **Outfit:** {character.text('outfit', locale)}\n"
        if character.keywords:
            md += f"- **Keywords:** {', '.join(character.keywords)}\n"
        md += "\n---\n\n"
    return md


def export_storyboard(scenes: list[Scene], story: Optional[StoryOption], locale: Locale) -> str:
    """Base storyboard, one section per scene."""
    title = story.text("title", locale) if story is not None else ""
    md = f'# Storyboard for "{title}"\n\n'
    for scene in scenes:
        md += f"## Scene {scene.scene_number} ({scene.estimated_duration})\n"
        md += f"- **Action:** {scene.text('visual_action', locale)}\n"
        md += f"- **Camera:** {scene.text('camera_movement', locale)}\n"
        md += f"- **Mood:** {scene.text('mood_and_lighting', locale)}\n"
        md += f"- **Lyrics:** {scene.lyrics_segment}\n\n"
        md += "---\n\n"
    return md


def export_detailed_storyboard(shots: list[Scene], story: Optional[StoryOption], locale: Locale) -> str:
    """Shooting script: one section per cut, lyrics only where the cut has them."""
    title = story.text("title", locale) if story is not None else ""
    md = f'# Detailed Storyboard (Shooting Script) for "{title}"\n\n'
    for shot in shots:
        md += f"## Cut {shot.scene_number} ({shot.estimated_duration})\n"
        md += f"- **Action:** {shot.text('visual_action', locale)}\n"
        md += f"- **Camera:** {shot.text('camera_movement', locale)}\n"
        md += f"- **Mood:** {shot.text('mood_and_lighting', locale)}\n"
        if shot.lyrics_segment:
            md += f"- **Lyrics:** {shot.lyrics_segment}\n"
        md += "\n"
    return md
