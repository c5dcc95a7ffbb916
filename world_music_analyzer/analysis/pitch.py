"""Pitch tracking - autocorrelation F0 estimation and note mapping."""

import logging
import warnings
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from ..core import AudioSignal, PITCH_NAMES
from ..core.constants import (
    PITCH_FRAME_SIZE,
    PITCH_FMIN,
    PITCH_FMAX,
    A4_FREQ,
    A4_MIDI,
    DEFAULT_MAX_PITCH_FRAMES,
    YIELD_EVERY,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PitchSample:
    """A single accepted pitch estimate."""

    frequency_hz: float
    timestamp_sec: float


PitchSeries = Tuple[PitchSample, ...]


@dataclass(frozen=True)
class PitchSummary:
    """Aggregate statistics over a PitchSeries.

    Numeric fields are None for an empty series.
    """

    count: int = 0
    mean_hz: Optional[float] = None
    min_hz: Optional[float] = None
    max_hz: Optional[float] = None
    std_hz: Optional[float] = None
    mean_note: Optional[str] = None
    most_common_note: Optional[str] = None
    note_histogram: Dict[int, int] = field(default_factory=dict)

    @property
    def variability(self) -> str:
        if self.std_hz is None:
            return "N/A"
        if self.std_hz > 50:
            return "High"
        if self.std_hz > 20:
            return "Moderate"
        return "Low"

    def format_hz(self, value: Optional[float]) -> str:
        return "N/A" if value is None else f"{value:.2f} Hz"


def frequency_to_midi_note(frequency: float) -> int:
    """Convert frequency (Hz) to the nearest MIDI note number."""
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")
    return int(round(A4_MIDI + 12 * np.log2(frequency / A4_FREQ)))


def midi_to_note_name(midi: int) -> str:
    """Get note name (e.g., 'A4', 'C#3') for a MIDI note number."""
    midi = int(midi)
    return f"{PITCH_NAMES[midi % 12]}{midi // 12 - 1}"


class PitchTracker:
    """Framewise fundamental-frequency estimation.

    Uses normalized autocorrelation: for each lag in the range covering
    ``fmin``-``fmax`` the frame is correlated with itself, and the first
    local peak that clears ``threshold`` gives the period.
    """

    def __init__(
        self,
        frame_size: int = PITCH_FRAME_SIZE,
        hop_length: Optional[int] = None,
        max_frames: int = DEFAULT_MAX_PITCH_FRAMES,
        fmin: float = PITCH_FMIN,
        fmax: float = PITCH_FMAX,
        threshold: float = 0.6,
        min_rms: float = 0.01,
        yield_every: int = YIELD_EVERY,
    ):
        """
        Initialize PitchTracker.

        Args:
            frame_size: Samples per analysis frame
            hop_length: Stride between frames (default: spread max_frames
                frames evenly over the window)
            max_frames: Maximum number of frames examined per clip
            fmin: Lowest detectable frequency (Hz)
            fmax: Highest detectable frequency (Hz)
            threshold: Minimum normalized correlation for a confident peak
            min_rms: Frames quieter than this report no pitch
            yield_every: Frames between cooperative checkpoints
        """
        self.frame_size = frame_size
        self.hop_length = hop_length
        self.max_frames = max_frames
        self.fmin = fmin
        self.fmax = fmax
        self.threshold = threshold
        self.min_rms = min_rms
        self.yield_every = yield_every

    def detect_pitch(self, frame: np.ndarray, sample_rate: int) -> float:
        """
        Estimate the fundamental frequency of one frame.

        Args:
            frame: Audio samples
            sample_rate: Sample rate in Hz

        Returns:
            Frequency in Hz, or 0.0 when no confident pitch is found
        """
        x = np.asarray(frame, dtype=np.float64)
        n = len(x)
        if n == 0:
            return 0.0

        x = x - x.mean()
        if np.sqrt(np.mean(x ** 2)) < self.min_rms:
            return 0.0

        min_lag = max(1, int(np.floor(sample_rate / self.fmax)))
        max_lag = int(np.ceil(sample_rate / self.fmin)) + 1
        if max_lag + 1 >= n:
            warnings.warn(
                f"Frame of {n} samples is too short for {self.fmin} Hz at {sample_rate} Hz; "
                "low pitches will be missed"
            )
            max_lag = n - 2
        if max_lag <= min_lag:
            return 0.0

        corr = self._normalized_autocorrelation(x, max_lag + 1)

        for lag in range(min_lag, max_lag + 1):
            value = corr[lag]
            if value < self.threshold:
                continue
            if value > corr[lag - 1] and value >= corr[lag + 1]:
                period = lag + self._parabolic_offset(corr[lag - 1], value, corr[lag + 1])
                return float(sample_rate / period)

        return 0.0

    def track(
        self,
        window: AudioSignal,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> PitchSeries:
        """
        Walk the window at a fixed stride and collect pitch estimates.

        Args:
            window: Trimmed analysis window
            checkpoint: Called every ``yield_every`` frames; may raise to abort

        Returns:
            PitchSeries of accepted (0 < f < fmax) estimates
        """
        samples = window.samples
        sr = window.sample_rate
        hop = self.hop_length or self._auto_hop(len(samples))
        series = []
        frames = 0

        start = 0
        while start + self.frame_size <= len(samples) and frames < self.max_frames:
            frequency = self.detect_pitch(samples[start:start + self.frame_size], sr)
            if 0 < frequency < self.fmax:
                series.append(PitchSample(frequency, start / sr))
            frames += 1
            if checkpoint is not None and frames % self.yield_every == 0:
                checkpoint()
            start += hop

        logger.debug("Pitch: %d of %d frames voiced", len(series), frames)
        return tuple(series)

    def _auto_hop(self, n_samples: int) -> int:
        """Stride that lays max_frames frames across the whole window."""
        span = n_samples - self.frame_size
        if span <= 0 or self.max_frames <= 1:
            return self.frame_size
        return max(self.frame_size // 2, span // (self.max_frames - 1))

    def _normalized_autocorrelation(self, x: np.ndarray, n_lags: int) -> np.ndarray:
        """Autocorrelation for lags 0..n_lags, each normalized by its overlap energy."""
        n = len(x)
        # Zero-padded FFT gives the linear (not circular) autocorrelation
        size = 1 << int(np.ceil(np.log2(2 * n)))
        spectrum = np.fft.rfft(x, size)
        raw = np.fft.irfft(spectrum * np.conj(spectrum), size)[: n_lags + 1]

        squared = np.concatenate(([0.0], np.cumsum(x ** 2)))
        lags = np.arange(n_lags + 1)
        head_energy = squared[n - lags]
        tail_energy = squared[n] - squared[lags]
        denom = np.sqrt(head_energy * tail_energy)

        with np.errstate(divide="ignore", invalid="ignore"):
            corr = np.where(denom > 0, raw / denom, 0.0)
        return corr

    @staticmethod
    def _parabolic_offset(left: float, center: float, right: float) -> float:
        """Sub-sample peak offset from a parabola through three points."""
        denom = left - 2 * center + right
        if denom == 0:
            return 0.0
        return float(np.clip(0.5 * (left - right) / denom, -0.5, 0.5))


def note_histogram(series: PitchSeries) -> Dict[int, int]:
    """Count MIDI notes in a series, keyed in order of first appearance."""
    return dict(Counter(frequency_to_midi_note(s.frequency_hz) for s in series))


def summarize_pitch(series: PitchSeries) -> PitchSummary:
    """
    Compute mean/range/spread and the most common note of a series.

    An empty series yields a summary whose aggregates are None.
    """
    if not series:
        return PitchSummary()

    freqs = np.array([s.frequency_hz for s in series])
    histogram = note_histogram(series)
    # max() keeps the first key among equal counts
    most_common = max(histogram, key=histogram.get)
    mean_hz = float(freqs.mean())

    return PitchSummary(
        count=len(series),
        mean_hz=mean_hz,
        min_hz=float(freqs.min()),
        max_hz=float(freqs.max()),
        std_hz=float(freqs.std()),
        mean_note=midi_to_note_name(frequency_to_midi_note(mean_hz)),
        most_common_note=midi_to_note_name(most_common),
        note_histogram=histogram,
    )


def detect_pitch(frame: np.ndarray, sample_rate: int, **kwargs) -> float:
    """Estimate the pitch of a single frame (0.0 = no confident pitch)."""
    return PitchTracker(**kwargs).detect_pitch(frame, sample_rate)


def track_pitch(
    window: AudioSignal,
    checkpoint: Optional[Callable[[], None]] = None,
    **kwargs,
) -> PitchSeries:
    """Track pitch across a window with a default-configured PitchTracker."""
    return PitchTracker(**kwargs).track(window, checkpoint=checkpoint)
