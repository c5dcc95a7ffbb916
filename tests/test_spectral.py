"""Tests for the averaged spectrum and timbre descriptors."""

import librosa
import numpy as np
import pytest

from world_music_analyzer.core import AudioSignal
from world_music_analyzer.analysis import SpectralAnalyzer, analyze_spectrum
from world_music_analyzer.analysis.spectral import spectral_centroid, spectral_rolloff


class TestSpectralAnalyzer:
    """Descriptors on synthetic signals."""

    @pytest.fixture
    def sr(self):
        return 22050

    @pytest.fixture
    def dense_analyzer(self):
        return SpectralAnalyzer(hop_length=2048)

    def test_white_noise_centroid(self, sr, dense_analyzer):
        rng = np.random.default_rng(0)
        noise = rng.standard_normal(sr * 5).astype(np.float32) * 0.1
        profile = dense_analyzer.analyze(AudioSignal(noise, sr))

        assert profile.frames_analyzed == 50
        assert profile.centroid_hz == pytest.approx(sr / 4, rel=0.1)
        assert profile.brightness == pytest.approx(0.5, abs=0.05)

    def test_sine_centroid_and_rolloff(self, sr, dense_analyzer):
        t = np.arange(sr * 2) / sr
        tone = (0.5 * np.sin(2 * np.pi * 1000 * t)).astype(np.float32)
        profile = dense_analyzer.analyze(AudioSignal(tone, sr))

        assert profile.centroid_hz == pytest.approx(1000, rel=0.05)
        assert profile.rolloff_hz == pytest.approx(1000, rel=0.03)
        assert profile.brightness < 0.2

    def test_descriptors_in_range(self, sr):
        rng = np.random.default_rng(1)
        audio = rng.standard_normal(sr * 3) * 0.2
        profile = analyze_spectrum(AudioSignal(audio, sr))

        assert 0.0 <= profile.brightness <= 1.0
        assert 0.0 <= profile.centroid_hz <= sr / 2
        assert 0.0 <= profile.rolloff_hz <= sr / 2
        assert profile.spectrum.shape == (1024,)

    def test_silence(self, sr):
        profile = analyze_spectrum(AudioSignal(np.zeros(sr * 2), sr))

        assert profile.centroid_hz == 0.0
        assert profile.rolloff_hz == 0.0
        assert profile.brightness == 0.0

    def test_empty_window(self, sr):
        profile = analyze_spectrum(AudioSignal(np.zeros(0), sr))
        assert profile.frames_analyzed == 0
        assert profile.centroid_hz == 0.0

    def test_window_shorter_than_frame(self, sr):
        t = np.arange(1000) / sr
        profile = analyze_spectrum(AudioSignal(np.sin(2 * np.pi * 500 * t), sr))

        assert profile.frames_analyzed == 1
        assert profile.spectrum.shape == (1024,)
        assert profile.centroid_hz > 0

    def test_window_cap(self, sr):
        audio = np.random.default_rng(2).standard_normal(sr * 10) * 0.1
        profile = SpectralAnalyzer(hop_length=1024, max_windows=7).analyze(AudioSignal(audio, sr))
        assert profile.frames_analyzed == 7

    def test_checkpoint(self, sr, dense_analyzer):
        calls = []
        audio = np.random.default_rng(4).standard_normal(sr * 5) * 0.1
        dense_analyzer.analyze(AudioSignal(audio, sr), checkpoint=lambda: calls.append(1))
        assert len(calls) == 10

    def test_blocks_match_single_stft(self, sr):
        audio = (np.random.default_rng(6).standard_normal(sr * 3) * 0.1).astype(np.float32)
        analyzer = SpectralAnalyzer(hop_length=2048, max_windows=12)

        profile = analyzer.analyze(AudioSignal(audio, sr))

        full = np.abs(librosa.stft(audio, n_fft=2048, hop_length=2048, center=False))
        expected = full[:1024, :12].mean(axis=1)
        assert profile.frames_analyzed == 12
        np.testing.assert_allclose(profile.spectrum, expected, rtol=1e-4, atol=1e-6)


class TestDescriptorFunctions:
    """Centroid and rolloff on hand-built spectra."""

    def test_flat_spectrum(self):
        spectrum = np.ones(4)
        freqs = np.array([0.0, 1.0, 2.0, 3.0])

        assert spectral_centroid(spectrum, freqs) == pytest.approx(1.5)
        assert spectral_rolloff(spectrum, freqs, 0.85) == 3.0
        assert spectral_rolloff(spectrum, freqs, 0.5) == 1.0

    def test_zero_spectrum(self):
        freqs = np.arange(8, dtype=float)
        assert spectral_centroid(np.zeros(8), freqs) == 0.0
        assert spectral_rolloff(np.zeros(8), freqs) == 0.0
