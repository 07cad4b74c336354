"""Tests for the bilingual field model."""

import pytest

from mvdirector.models.localization import Locale, resolve
from mvdirector.models.schemas import Character, StoryOption


class TestResolve:
    def test_locale_value_wins(self):
        story = StoryOption(title="제목", localized={Locale.EN: {"title": "Title"}})

        assert resolve(story, "title", Locale.EN) == "Title"

    def test_falls_back_to_canonical(self):
        story = StoryOption(title="제목", localized={Locale.EN: {"title": ""}})

        assert resolve(story, "title", Locale.EN) == "제목"
        assert resolve(story, "title", "ko") == "제목"

    def test_missing_everything_is_empty(self):
        assert resolve(StoryOption(), "title", Locale.EN) == ""
        assert resolve(None, "title", Locale.KO) == ""

    def test_unknown_field_is_empty(self):
        assert resolve(StoryOption(title="x"), "nope", Locale.KO) == ""

    def test_flat_mapping(self):
        data = {"title": "Canonical", "title_ko": "한국어", "title_en": ""}

        assert resolve(data, "title", "ko") == "한국어"
        assert resolve(data, "title", "en") == "Canonical"

    def test_locale_other(self):
        assert Locale.KO.other is Locale.EN
        assert Locale.EN.other is Locale.KO


class TestFromFlat:
    def test_default_locale_fills_canonical(self):
        data = {"title_ko": "비", "title_en": "Rain", "mood_ko": "슬픈", "mood_en": "Sad"}

        story = StoryOption.from_flat(data, Locale.KO)

        assert story.title == "비"
        assert story.text("title", Locale.EN) == "Rain"
        assert story.text("mood", Locale.KO) == "슬픈"

    def test_missing_default_locale_uses_other(self):
        story = StoryOption.from_flat({"title_en": "Rain"}, Locale.KO)

        assert story.title == "Rain"
        assert story.text("title", Locale.KO) == "Rain"

    def test_extra_fields_pass_through(self):
        character = Character.from_flat({"name_en": "Mina"}, Locale.EN, keywords=["rain"])

        assert character.keywords == ["rain"]

    def test_to_flat_dict(self):
        story = StoryOption.from_flat({"title_ko": "비", "title_en": "Rain"}, Locale.EN)

        flat = story.to_flat_dict()

        assert flat["title"] == "Rain"
        assert flat["title_ko"] == "비"
        assert flat["genre_en"] == ""
        assert "localized" not in flat


class TestManualEdit:
    def test_edit_shows_in_both_locales(self):
        story = StoryOption.from_flat({"title_ko": "비", "title_en": "Rain"}, Locale.KO)

        story.apply_manual_edit("title", "Snow")

        assert story.text("title", Locale.KO) == "Snow"
        assert story.text("title", Locale.EN) == "Snow"

    def test_edit_keeps_other_fields_localized(self):
        story = StoryOption.from_flat(
            {"title_ko": "비", "title_en": "Rain", "mood_ko": "슬픈", "mood_en": "Sad"},
            Locale.KO,
        )

        story.apply_manual_edit("title", "Snow")

        assert story.text("mood", Locale.EN) == "Sad"

    def test_unknown_field_raises(self):
        with pytest.raises(KeyError):
            StoryOption().apply_manual_edit("keywords", "x")

    def test_set_localized(self):
        story = StoryOption(title="비")
        story.set_localized("title", "en", "Rain")

        assert story.title == "비"
        assert story.text("title", Locale.EN) == "Rain"
