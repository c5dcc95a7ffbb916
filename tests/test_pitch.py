"""Tests for pitch tracking, note mapping and pitch summaries."""

import numpy as np
import pytest

from world_music_analyzer.core import AudioSignal
from world_music_analyzer.analysis import (
    PitchSample,
    PitchTracker,
    detect_pitch,
    frequency_to_midi_note,
    midi_to_note_name,
    note_histogram,
    summarize_pitch,
    track_pitch,
)


def sine(freq, sr, duration=1.0, amplitude=0.5):
    t = np.arange(int(duration * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


class TestDetectPitch:
    """Single-frame F0 estimation."""

    @pytest.mark.parametrize("sr", [22050, 44100])
    @pytest.mark.parametrize("freq", [60.0, 110.0, 440.0, 1000.0, 1500.0])
    def test_sine_accuracy(self, freq, sr):
        frame = sine(freq, sr)[:4096]
        detected = detect_pitch(frame, sr)
        assert detected == pytest.approx(freq, rel=0.02), f"{freq} Hz at {sr} Hz -> {detected}"

    def test_harmonic_tone_reports_fundamental(self):
        sr = 22050
        tone = sine(220, sr) + sine(440, sr, amplitude=0.3) + sine(660, sr, amplitude=0.2)
        assert detect_pitch(tone[:4096], sr) == pytest.approx(220, rel=0.02)

    def test_silence(self):
        assert detect_pitch(np.zeros(4096), 22050) == 0.0

    def test_quiet_frame_is_unvoiced(self):
        assert detect_pitch(sine(440, 22050, amplitude=0.001)[:4096], 22050) == 0.0

    def test_empty_frame(self):
        assert detect_pitch(np.array([]), 22050) == 0.0

    def test_short_frame_warns(self):
        with pytest.warns(UserWarning):
            PitchTracker().detect_pitch(sine(440, 22050)[:256], 22050)


class TestTrackPitch:
    """Framewise tracking over a window."""

    @pytest.fixture
    def sr(self):
        return 22050

    @pytest.fixture
    def window(self, sr):
        return AudioSignal(sine(440, sr, duration=2.0), sr)

    def test_tracks_steady_tone(self, window):
        series = track_pitch(window)

        assert len(series) == 20
        for sample in series:
            assert sample.frequency_hz == pytest.approx(440, rel=0.02)
        times = [s.timestamp_sec for s in series]
        assert times == sorted(times)
        assert times[0] == 0.0

    def test_frame_cap(self, window):
        assert len(PitchTracker(max_frames=5).track(window)) == 5

    def test_fixed_hop(self, window, sr):
        series = PitchTracker(hop_length=4096, max_frames=100).track(window)
        # 44100 samples hold 10 whole 4096-sample frames
        assert len(series) == 10
        assert series[1].timestamp_sec == pytest.approx(4096 / sr)

    def test_checkpoint_called_every_few_frames(self, window):
        calls = []
        PitchTracker(max_frames=20, yield_every=5).track(window, checkpoint=lambda: calls.append(1))
        assert len(calls) == 4

    def test_checkpoint_can_abort(self, window):
        class Stop(Exception):
            pass

        def checkpoint():
            raise Stop()

        with pytest.raises(Stop):
            PitchTracker().track(window, checkpoint=checkpoint)

    def test_silence_gives_empty_series(self, sr):
        assert track_pitch(AudioSignal(np.zeros(sr * 2), sr)) == ()

    def test_window_shorter_than_frame(self, sr):
        assert track_pitch(AudioSignal(sine(440, sr)[:1000], sr)) == ()


class TestNoteMapping:
    """Frequency to MIDI note and note names."""

    def test_a4(self):
        assert frequency_to_midi_note(440.0) == 69
        assert midi_to_note_name(69) == "A4"

    def test_middle_c(self):
        assert frequency_to_midi_note(261.63) == 60
        assert midi_to_note_name(60) == "C4"
        assert midi_to_note_name(61) == "C#4"

    def test_rounds_to_nearest(self):
        assert frequency_to_midi_note(445.0) == 69
        assert frequency_to_midi_note(460.0) == 70

    def test_non_positive_frequency(self):
        with pytest.raises(ValueError):
            frequency_to_midi_note(0.0)


class TestPitchSummary:
    """Aggregates over a pitch series."""

    def test_empty_series(self):
        summary = summarize_pitch(())

        assert summary.count == 0
        assert summary.mean_hz is None
        assert summary.min_hz is None
        assert summary.most_common_note is None
        assert summary.format_hz(summary.mean_hz) == "N/A"
        assert summary.variability == "N/A"

    def test_statistics(self):
        series = tuple(PitchSample(f, i * 0.1) for i, f in enumerate([220.0, 440.0, 440.0]))
        summary = summarize_pitch(series)

        assert summary.count == 3
        assert summary.mean_hz == pytest.approx(1100.0 / 3)
        assert summary.min_hz == 220.0
        assert summary.max_hz == 440.0
        assert summary.most_common_note == "A4"
        assert summary.variability == "High"
        assert summary.format_hz(440.0) == "440.00 Hz"

    def test_most_common_tie_keeps_first_seen(self):
        series = tuple(
            PitchSample(f, i * 0.1) for i, f in enumerate([523.25, 440.0, 440.0, 523.25])
        )
        assert summarize_pitch(series).most_common_note == "C5"

    def test_histogram_order(self):
        series = (PitchSample(440.0, 0.0), PitchSample(261.63, 0.1), PitchSample(440.0, 0.2))
        assert list(note_histogram(series).items()) == [(69, 2), (60, 1)]
