"""Tests for the duration-constrained splitter."""

import logging

import pytest

from conftest import scene_item

from mvdirector.errors import MalformedResponseError
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Scene, StoryOption
from mvdirector.pipeline.splitter import DurationSplitter, find_duration_violations


def _shots(*durations):
    return [Scene(scene_number=10 + i, estimated_duration=d) for i, d in enumerate(durations)]


class TestFindDurationViolations:
    def test_within_bound(self):
        assert find_duration_violations(_shots("5s", "0.5s", "4.9초"), 5.0) == []

    def test_reports_each_offender(self):
        problems = find_duration_violations(_shots("3s", "5.1s", "long", ""), 5.0)

        assert len(problems) == 3
        assert problems[0].startswith("shot 2")
        assert "unparseable" in problems[1]


class TestEnforce:
    def test_renumbers_densely(self):
        shots = DurationSplitter(5.0).enforce(_shots("2s", "3s", "4s"), base_count=2)

        assert [s.scene_number for s in shots] == [1, 2, 3]

    def test_violation_raises(self):
        with pytest.raises(MalformedResponseError) as exc:
            DurationSplitter(5.0).enforce(_shots("2s", "6s"), base_count=1)
        assert exc.value.details == ["shot 2: 6s exceeds 5s"]

    def test_fewer_shots_than_base_scenes_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            shots = DurationSplitter(5.0).enforce(_shots("2s"), base_count=3)

        assert len(shots) == 1
        assert "fewer shots" in caplog.text

    def test_custom_bound(self):
        with pytest.raises(MalformedResponseError):
            DurationSplitter(3.0).enforce(_shots("4s"), base_count=1)


class TestSplit:
    def test_split_through_gateway(self, gateway, text_generator):
        text_generator.queue([scene_item(7, "2s"), scene_item(3, "4.5s")])
        base = [Scene(scene_number=1, estimated_duration="8s")]

        shots = DurationSplitter(5.0).split(
            gateway,
            base_scenes=base,
            story=StoryOption(title="Rain"),
            characters=[],
            locale=Locale.EN,
            default_locale=Locale.EN,
        )

        # Model order is kept; numbering is reassigned
        assert [s.lyrics_segment for s in shots] == ["line 7", "line 3"]
        assert [s.scene_number for s in shots] == [1, 2]
