"""Tests for loading culture tables from JSON."""

import json

import pytest

from world_music_analyzer.core import ConfigurationError
from world_music_analyzer.inference import (
    DEFAULT_CULTURES,
    cultures_by_region,
    load_culture_table,
)


def write_table(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def valid_entry():
    return {
        "id": "test-tradition",
        "name": "Test Tradition",
        "region": "Nowhere",
        "tempo": [80, 120],
        "rhythm": ["Steady", "regular"],
        "scales": ["pentatonic"],
        "instruments": ["bright"],
        "description": "A tradition used in tests.",
    }


class TestLoadCultureTable:

    def test_load_valid(self, tmp_path, valid_entry):
        table = load_culture_table(write_table(tmp_path / "cultures.json", [valid_entry]))

        assert len(table) == 1
        culture = table[0]
        assert culture.id == "test-tradition"
        assert culture.characteristics.tempo_range_bpm == (80.0, 120.0)
        assert culture.characteristics.tempo_midpoint == 100.0
        # Tags are lower-cased
        assert culture.characteristics.rhythm_tags == frozenset({"steady", "regular"})

    def test_optional_fields(self, tmp_path):
        entry = {"id": "bare", "name": "Bare", "region": "X", "tempo": [60, 60]}
        culture = load_culture_table(write_table(tmp_path / "t.json", [entry]))[0]
        assert culture.characteristics.scale_tags == frozenset()
        assert culture.description == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_culture_table(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_culture_table(path)

    def test_not_a_list(self, tmp_path, valid_entry):
        with pytest.raises(ConfigurationError):
            load_culture_table(write_table(tmp_path / "t.json", valid_entry))

    def test_missing_key(self, tmp_path, valid_entry):
        del valid_entry["tempo"]
        with pytest.raises(ConfigurationError, match="tempo"):
            load_culture_table(write_table(tmp_path / "t.json", [valid_entry]))

    @pytest.mark.parametrize("tempo", [[120, 80], [0, 100], ["fast", 100], 100, [1, 2, 3]])
    def test_bad_tempo(self, tmp_path, valid_entry, tempo):
        valid_entry["tempo"] = tempo
        with pytest.raises(ConfigurationError):
            load_culture_table(write_table(tmp_path / "t.json", [valid_entry]))

    def test_non_string_tags(self, tmp_path, valid_entry):
        valid_entry["rhythm"] = ["steady", 3]
        with pytest.raises(ConfigurationError):
            load_culture_table(write_table(tmp_path / "t.json", [valid_entry]))

    def test_duplicate_ids(self, tmp_path, valid_entry):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            load_culture_table(write_table(tmp_path / "t.json", [valid_entry, valid_entry]))

    def test_configuration_error_is_value_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[1]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_culture_table(path)


class TestCulturesByRegion:

    def test_case_insensitive(self):
        names = {c.id for c in cultures_by_region("east asia")}
        assert names == {"chinese-traditional", "japanese-traditional"}

    def test_unknown_region(self):
        assert cultures_by_region("Antarctica", DEFAULT_CULTURES) == []
