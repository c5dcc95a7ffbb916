"""Tests for AudioSignal construction and analysis-window trimming."""

import numpy as np
import pytest

from world_music_analyzer.core import (
    AudioSignal,
    ConfigurationError,
    EmptySignal,
    StageFault,
)
from world_music_analyzer.input import SignalPreprocessor, trim_to_window


class TestAudioSignal:
    """AudioSignal validation and immutability."""

    def test_samples_are_read_only_copy(self):
        source = np.ones(100, dtype=np.float64)
        signal = AudioSignal(source, 8000)

        source[0] = 5.0
        assert signal.samples[0] == 1.0
        assert signal.samples.dtype == np.float32
        with pytest.raises(ValueError):
            signal.samples[0] = 2.0

    def test_duration(self):
        signal = AudioSignal(np.zeros(22050), 22050)
        assert signal.num_samples == 22050
        assert signal.duration == pytest.approx(1.0)

    def test_rejects_stereo(self):
        with pytest.raises(StageFault):
            AudioSignal(np.zeros((2, 100)), 22050)

    def test_rejects_bad_sample_rate(self):
        with pytest.raises(StageFault):
            AudioSignal(np.zeros(100), 0)

    def test_rejects_non_finite(self):
        samples = np.zeros(100)
        samples[10] = np.nan
        with pytest.raises(StageFault):
            AudioSignal(samples, 22050)


class TestTrimToWindow:
    """Trimming keeps only the leading window."""

    @pytest.fixture
    def sample_rate(self):
        return 22050

    def test_long_signal_is_trimmed(self, sample_rate):
        signal = AudioSignal(np.random.randn(sample_rate * 20) * 0.1, sample_rate)
        window = trim_to_window(signal, 15.0)

        assert window.num_samples == sample_rate * 15
        assert window.sample_rate == sample_rate
        np.testing.assert_array_equal(window.samples, signal.samples[: sample_rate * 15])

    def test_short_signal_unchanged(self, sample_rate):
        signal = AudioSignal(np.ones(sample_rate * 2), sample_rate)
        window = trim_to_window(signal, 15.0)
        assert window.num_samples == signal.num_samples

    def test_empty_signal_raises(self, sample_rate):
        with pytest.raises(EmptySignal):
            trim_to_window(AudioSignal(np.zeros(0), sample_rate), 15.0)

    def test_non_positive_duration_raises(self, sample_rate):
        signal = AudioSignal(np.ones(100), sample_rate)
        with pytest.raises(ConfigurationError):
            trim_to_window(signal, 0)
        with pytest.raises(ConfigurationError):
            trim_to_window(signal, -1.0)

    def test_tiny_duration_keeps_one_sample(self, sample_rate):
        signal = AudioSignal(np.ones(100), sample_rate)
        assert trim_to_window(signal, 1e-9).num_samples == 1

    def test_preprocessor_validates_up_front(self):
        with pytest.raises(ConfigurationError):
            SignalPreprocessor(0)

    def test_preprocessor_trims(self, sample_rate):
        signal = AudioSignal(np.ones(sample_rate * 4), sample_rate)
        assert SignalPreprocessor(1.5).process(signal).duration == pytest.approx(1.5)
