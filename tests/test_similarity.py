"""Tests for cultural similarity scoring."""

import numpy as np
import pytest

from world_music_analyzer.core import ConfigurationError, StageFault
from world_music_analyzer.analysis import RhythmProfile, SpectralProfile
from world_music_analyzer.inference import (
    CultureCharacteristics,
    CultureMatcher,
    CultureRecord,
    DEFAULT_CULTURES,
    ScaleMatch,
    get_culture,
    match_cultures,
)


def record(id, tempo=(60, 100), rhythm=(), scales=(), instruments=()):
    return CultureRecord(
        id=id,
        name=id.title(),
        region="Test",
        characteristics=CultureCharacteristics(
            tempo_range_bpm=tempo,
            rhythm_tags=frozenset(rhythm),
            scale_tags=frozenset(scales),
            instrument_tags=frozenset(instruments),
        ),
    )


class TestCultureMatcher:
    """Scoring and ranking."""

    @pytest.fixture
    def steady_rhythm(self):
        return RhythmProfile(tempo=80.0, peak_count=20, regularity=0.9)

    @pytest.fixture
    def pentatonic_major(self):
        return ScaleMatch("Pentatonic Major", 0.95, "C", frozenset({"pentatonic", "major"}))

    def test_best_match(self, steady_rhythm, pentatonic_major):
        matches = match_cultures(steady_rhythm, pentatonic_major)

        assert matches[0].culture_id == "chinese-traditional"
        # tempo +3, steady +2, regular +2, pentatonic +3
        assert matches[0].score == 10
        assert len(matches[0].reasons) == 4

    def test_ranked_and_capped(self, steady_rhythm, pentatonic_major):
        matches = match_cultures(steady_rhythm, pentatonic_major, top_n=3)

        assert len(matches) == 3
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)

    def test_deterministic(self, steady_rhythm, pentatonic_major):
        first = match_cultures(steady_rhythm, pentatonic_major)
        second = match_cultures(steady_rhythm, pentatonic_major)
        assert first == second

    def test_only_positive_scores(self):
        matches = match_cultures(RhythmProfile(), ScaleMatch("Unknown", 0.0))
        assert matches == ()

    def test_ties_keep_table_order(self, steady_rhythm):
        table = [
            record("first", rhythm=["steady"]),
            record("second", rhythm=["steady"]),
            record("third", rhythm=["steady"]),
        ]
        matches = CultureMatcher(table).match(steady_rhythm, ScaleMatch("Unknown", 0.0))
        assert [m.culture_id for m in matches] == ["first", "second", "third"]
        assert len({m.score for m in matches}) == 1

    def test_zero_tempo_earns_no_tempo_points(self):
        table = [record("slow", tempo=(1, 10))]
        rhythm = RhythmProfile(tempo=0.0)
        assert CultureMatcher(table).match(rhythm, ScaleMatch("Unknown", 0.0)) == ()

    def test_tempo_tiers(self):
        matcher = CultureMatcher([record("x", tempo=(90, 110))])
        culture = matcher.cultures[0]
        scale = ScaleMatch("Unknown", 0.0)

        assert matcher.score(culture, RhythmProfile(tempo=110.0), scale)[0] == 3
        assert matcher.score(culture, RhythmProfile(tempo=125.0), scale)[0] == 2
        assert matcher.score(culture, RhythmProfile(tempo=145.0), scale)[0] == 1
        assert matcher.score(culture, RhythmProfile(tempo=160.0), scale)[0] == 0

    def test_polyrhythm_points(self):
        matcher = CultureMatcher([record("x", tempo=(300, 400), rhythm=["complex", "polyrhythmic"])])
        rhythm = RhythmProfile(tempo=100.0, polyrhythmic=True, polyrhythm_ratio="3:2")
        score, reasons = matcher.score(matcher.cultures[0], rhythm, ScaleMatch("Unknown", 0.0))
        assert score == 6
        assert len(reasons) == 2

    def test_timbre_bonus(self):
        table = [record("bright", tempo=(300, 400), instruments=["bright"])]
        spectral = SpectralProfile(np.zeros(4), 5000.0, 8000.0, 0.7)
        scale = ScaleMatch("Unknown", 0.0)

        assert CultureMatcher(table).match(RhythmProfile(), scale) == ()
        matches = CultureMatcher(table).match(RhythmProfile(), scale, spectral)
        assert matches[0].score == 1

    def test_rejects_bad_top_n(self):
        with pytest.raises(ConfigurationError):
            CultureMatcher(top_n=0)

    def test_malformed_entry(self, steady_rhythm, pentatonic_major):
        with pytest.raises(StageFault) as exc_info:
            CultureMatcher([DEFAULT_CULTURES[0], "not a culture"]).match(
                steady_rhythm, pentatonic_major
            )
        assert exc_info.value.stage == "cultural_match"

    def test_invalid_tempo_range(self, steady_rhythm, pentatonic_major):
        with pytest.raises(StageFault):
            CultureMatcher([record("bad", tempo=(120, 60))]).match(
                steady_rhythm, pentatonic_major
            )


class TestCultureTable:
    """The built-in table."""

    def test_ids_are_unique(self):
        ids = [c.id for c in DEFAULT_CULTURES]
        assert len(ids) == len(set(ids))

    def test_tempo_ranges_valid(self):
        for culture in DEFAULT_CULTURES:
            low, high = culture.characteristics.tempo_range_bpm
            assert 0 < low <= high

    def test_get_culture(self):
        assert get_culture("west-african").name == "West African"
        with pytest.raises(KeyError):
            get_culture("atlantis")
