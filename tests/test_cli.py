"""Tests for the command-line interface."""

import json

import numpy as np
import pytest
import soundfile as sf
from typer.testing import CliRunner

from world_music_analyzer.cli import app

runner = CliRunner()


@pytest.fixture
def tone_file(tmp_path):
    sr = 22050
    t = np.arange(sr * 2) / sr
    path = tmp_path / "tone.wav"
    sf.write(str(path), 0.4 * np.sin(2 * np.pi * 440 * t), sr)
    return path


class TestCli:

    def test_analyze_json(self, tone_file):
        result = runner.invoke(app, ["analyze", str(tone_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["sample_rate"] == 22050
        assert data["pitch"]["most_common_note"] == "A4"
        assert "similarity" in data

    def test_analyze_table_output(self, tone_file):
        result = runner.invoke(app, ["analyze", str(tone_file)])
        assert result.exit_code == 0, result.output
        assert "Analysis complete" in result.output

    def test_analyze_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1

    def test_analyze_bad_option(self, tone_file):
        result = runner.invoke(app, ["analyze", str(tone_file), "--top", "0"])
        assert result.exit_code == 1

    def test_cultures_by_region(self):
        result = runner.invoke(app, ["cultures", "--region", "Europe"])
        assert result.exit_code == 0
        assert "celtic" in result.output

    def test_info(self, tone_file):
        result = runner.invoke(app, ["info", str(tone_file)])
        assert result.exit_code == 0
        assert "22050" in result.output

    @pytest.mark.parametrize("command", ["analyze", "info"])
    def test_undecodable_file(self, tmp_path, command):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"\x00garbage" * 64)

        result = runner.invoke(app, [command, str(path)])

        assert result.exit_code == 1
        assert "Could not decode" in result.output
        assert isinstance(result.exception, SystemExit)
